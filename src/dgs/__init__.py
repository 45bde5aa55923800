# Diversity-constrained selection core
from .config import (
    CategorizationConfig,
    DgsConfig,
    SelectionConfig,
    TargetFilterConfig,
    default_dgs_config,
)
from .diagnostics import DiagnosticEvent, DiagnosticSink, LoggingSink, RecordingSink
from .engine import apply_diversity_constraints, run_selection_round
from .gravity import apply_gravity_updates, clamp_gravity, compute_attraction, normalize_gravities
from .metadata import extract_track_features, get_popularity_band
from .rules import card_feedback, calculate_move_category, get_exploration_phase
from .scoring import PoolCandidate, score_candidates
from .similarity import compute_artist_similarity, compute_similarity
from .types import (
    ArtistProfile,
    ArtistRef,
    CandidateMetric,
    CategorizedCandidate,
    RoundContext,
    SelectionResult,
    TargetProfile,
    TrackFeatureRecord,
)

__all__ = [
    # Config
    "CategorizationConfig",
    "DgsConfig",
    "SelectionConfig",
    "TargetFilterConfig",
    "default_dgs_config",
    # Diagnostics
    "DiagnosticEvent",
    "DiagnosticSink",
    "LoggingSink",
    "RecordingSink",
    # Pipeline
    "apply_diversity_constraints",
    "run_selection_round",
    "score_candidates",
    "PoolCandidate",
    # Gravity / attraction
    "apply_gravity_updates",
    "clamp_gravity",
    "compute_attraction",
    "normalize_gravities",
    # Metadata / similarity
    "extract_track_features",
    "get_popularity_band",
    "compute_similarity",
    "compute_artist_similarity",
    # Rules
    "card_feedback",
    "calculate_move_category",
    "get_exploration_phase",
    # Types
    "ArtistProfile",
    "ArtistRef",
    "CandidateMetric",
    "CategorizedCandidate",
    "RoundContext",
    "SelectionResult",
    "TargetProfile",
    "TrackFeatureRecord",
]

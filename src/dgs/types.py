"""
Data model for the selection core.

Every record here is frozen. Stages that assign a category produce
``CategorizedCandidate`` pairs instead of mutating the metric; the final
labels are stamped onto copies of the metrics only when the
``SelectionResult`` is built.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from .rules import CATEGORIES, PLAYER_IDS


@dataclass(frozen=True)
class ArtistRef:
    """An artist credit on a track, as delivered by the catalog."""
    id: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class ArtistProfile:
    """Catalog-side artist metadata (genres and audience size)."""
    id: str
    name: str
    genres: Tuple[str, ...] = ()
    popularity: Optional[int] = None
    followers: Optional[int] = None


@dataclass(frozen=True)
class TrackFeatureRecord:
    """Flat feature record extracted from a catalog track and its artist profile."""
    id: str
    name: str
    artists: Tuple[ArtistRef, ...] = ()
    genres: Tuple[str, ...] = ()
    popularity: int = 50
    duration_ms: int = 180_000
    release_year: Optional[int] = None
    is_playable: bool = True
    explicit: bool = False
    uri: Optional[str] = None

    @property
    def primary_artist_id(self) -> Optional[str]:
        return self.artists[0].id if self.artists else None

    @property
    def primary_artist_name(self) -> Optional[str]:
        return self.artists[0].name if self.artists else None


@dataclass(frozen=True)
class TargetProfile:
    """A player's hidden target artist. Read-only for the whole game."""
    artist_name: str
    artist_id: Optional[str] = None
    genres: Tuple[str, ...] = ()
    popularity: Optional[int] = None
    followers: Optional[int] = None

    def as_artist_profile(self) -> ArtistProfile:
        return ArtistProfile(
            id=self.artist_id or "",
            name=self.artist_name,
            genres=self.genres,
            popularity=self.popularity,
            followers=self.followers,
        )


@dataclass(frozen=True)
class CandidateMetric:
    """
    Per-candidate scores for one round.

    Attributes:
        track: Extracted feature record
        source: How the candidate was discovered (recommendations, related_top_tracks, ...)
        sim_score: Similarity to the currently playing track
        a_attraction: Attraction toward player1's target
        b_attraction: Attraction toward player2's target
        final_score: Combined ranking score in [0, 1]
        baseline: Current track's attraction to the active player's target
        popularity_band: low / mid / high
        selection_category: Set only on metrics returned in a SelectionResult
    """
    track: TrackFeatureRecord
    source: str
    sim_score: float
    a_attraction: float
    b_attraction: float
    final_score: float
    baseline: float
    popularity_band: str
    artist_id: Optional[str] = None
    artist_name: Optional[str] = None
    artist_genres: Tuple[str, ...] = ()
    gravity_score: float = 0.0
    stabilized_score: float = 0.0
    selection_category: Optional[str] = None

    def attraction_for(self, player_id: str) -> float:
        if player_id == "player1":
            return self.a_attraction
        if player_id == "player2":
            return self.b_attraction
        raise ValueError(f"Unknown player id: {player_id!r}")

    def diff_for(self, player_id: str) -> float:
        """Attraction delta from the round baseline for the given player."""
        return self.attraction_for(player_id) - self.baseline

    def with_category(self, category: str) -> "CandidateMetric":
        return replace(self, selection_category=category)


@dataclass(frozen=True)
class CategorizedCandidate:
    """A (candidate, category) pairing produced by a selection stage."""
    metric: CandidateMetric
    category: str
    diff: float


@dataclass(frozen=True)
class RoundContext:
    """
    Everything the selection core needs to know about the current turn.

    ``gravities`` must be a snapshot owned by this call; the core never
    writes to it.
    """
    round_number: int
    active_player_id: str
    targets: Mapping[str, Optional[TargetProfile]] = field(default_factory=dict)
    gravities: Mapping[str, float] = field(default_factory=dict)
    force_hard_convergence: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.active_player_id not in PLAYER_IDS:
            raise ValueError(f"Unknown active player id: {self.active_player_id!r}")
        if int(self.round_number) < 1:
            raise ValueError(f"Round number must be >= 1, got {self.round_number}")
        unknown = set(self.targets) - set(PLAYER_IDS)
        if unknown:
            raise ValueError(f"Unknown player ids in targets: {sorted(unknown)}")

    def target_for(self, player_id: str) -> Optional[TargetProfile]:
        return self.targets.get(player_id)


@dataclass(frozen=True)
class SelectionResult:
    """
    The option set for one turn.

    Attributes:
        selected: Up to nine metrics, each carrying its corrected selection_category
        filtered_artist_names: Target artists dropped by the early-round filter
        diagnostics: Tolerance, pool sizes, quality scores and other round facts
    """
    selected: Tuple[CandidateMetric, ...]
    filtered_artist_names: frozenset = frozenset()
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.selected)

    def category_counts(self) -> Dict[str, int]:
        counts = {category: 0 for category in CATEGORIES}
        for metric in self.selected:
            if metric.selection_category in counts:
                counts[metric.selection_category] += 1
        return counts

"""
Game rules and constants for the convergence duel.

Threshold choices for the target-artist filter:
    TARGET_BOOST_ROUND = 8 and GRAVITY_OVERRIDE_THRESHOLD = GRAVITY_LIMITS.max
    (0.70) are canonical. The older values 10 and 0.59 are kept as
    SUPERSEDED_* constants for reference only and are not read anywhere in
    the selection path.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple

PlayerId = Literal["player1", "player2"]
MoveCategory = Literal["closer", "neutral", "further"]
PopularityBand = Literal["low", "mid", "high"]

PLAYER_IDS: Tuple[str, str] = ("player1", "player2")
CATEGORIES: Tuple[str, str, str] = ("closer", "neutral", "further")

MAX_ROUND_TURNS = 10
DISPLAY_OPTION_COUNT = 9
TRACKS_PER_CATEGORY = 3
MIN_CANDIDATE_POOL = 100


@dataclass(frozen=True)
class GravityLimits:
    min: float = 0.15
    max: float = 0.70


GRAVITY_LIMITS = GravityLimits()
DEFAULT_PLAYER_GRAVITY = 0.32

# Inter-round gravity updates
GRAVITY_ADJUSTMENTS: Dict[str, float] = {
    "closer": 0.10,
    "neutral": 0.02,
    "further": -0.05,
}
UNDERDOG_TRIGGER_HIGH = 0.5
UNDERDOG_TRIGGER_LOW = 0.25
UNDERDOG_BONUS = 0.05

# Scoring
OG_CONSTANT = 0.12
GRAVITY_BOOST_THRESHOLD = 0.35

CATEGORY_WEIGHTS: Dict[str, float] = {
    "closer": 0.34,
    "neutral": 0.33,
    "further": 0.33,
}

GUARANTEED_MINIMUMS: Dict[str, int] = {
    "closer": 3,
    "neutral": 3,
    "further": 3,
}

# Advisory only; categories below these are logged, never blocked.
# "further" is compared on the magnitude of the mean attraction delta.
MIN_QUALITY_THRESHOLDS: Dict[str, float] = {
    "closer": 0.15,
    "neutral": 0.05,
    "further": 0.10,
}

# Categorization
NEUTRAL_TOLERANCE = 0.02
ADAPTIVE_TOLERANCE_FLOOR = 0.015
ADAPTIVE_TOLERANCE_RATIO = 0.2
FLAT_DISTRIBUTION_RANGE = 0.10

# Target-artist filter
TARGET_SIMILARITY_THRESHOLD = 0.4
TARGET_BOOST_ROUND = 8
GRAVITY_OVERRIDE_THRESHOLD = GRAVITY_LIMITS.max
HARD_CONVERGENCE_ROUND = MAX_ROUND_TURNS
SUPERSEDED_TARGET_BOOST_ROUND = 10
SUPERSEDED_GRAVITY_OVERRIDE_THRESHOLD = 0.59

# Similarity tiers used for diagnostics
SIMILARITY_TIER_LOW_MAX = 0.4
SIMILARITY_TIER_MEDIUM_MAX = 0.7


@dataclass(frozen=True)
class ExplorationPhase:
    level: Literal["high", "medium", "low"]
    og_drift: float
    rounds: Tuple[int, int]


EXPLORATION_PHASES: Tuple[ExplorationPhase, ...] = (
    ExplorationPhase(level="high", og_drift=0.2, rounds=(1, 2)),
    ExplorationPhase(level="medium", og_drift=0.5, rounds=(3, 5)),
    ExplorationPhase(level="low", og_drift=0.8, rounds=(6, 10)),
)


def get_exploration_phase(round_number: int) -> ExplorationPhase:
    """Phase for a 1-based round; rounds past the table reuse the last phase."""
    for phase in EXPLORATION_PHASES:
        if phase.rounds[0] <= round_number <= phase.rounds[1]:
            return phase
    return EXPLORATION_PHASES[-1]


def calculate_move_category(
    attraction: float,
    baseline: float,
    tolerance: float = NEUTRAL_TOLERANCE,
) -> MoveCategory:
    """Category of a move from the attraction delta against the baseline."""
    diff = attraction - baseline
    if diff > tolerance:
        return "closer"
    if diff < -tolerance:
        return "further"
    return "neutral"


def similarity_tier(sim_score: float) -> str:
    if sim_score < SIMILARITY_TIER_LOW_MAX:
        return "low"
    if sim_score < SIMILARITY_TIER_MEDIUM_MAX:
        return "medium"
    return "high"


def opponent_of(player_id: str) -> str:
    if player_id not in PLAYER_IDS:
        raise ValueError(f"Unknown player id: {player_id!r}")
    return "player2" if player_id == "player1" else "player1"


def card_feedback(metric, active_player_id: str) -> MoveCategory:
    """
    Category shown on an option card.

    Prefers the category assigned during selection and falls back to the
    strict tolerance calculation.
    """
    assigned: Optional[str] = getattr(metric, "selection_category", None)
    if assigned:
        return assigned  # type: ignore[return-value]
    return calculate_move_category(metric.attraction_for(active_player_id), metric.baseline)

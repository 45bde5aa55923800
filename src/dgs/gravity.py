"""
Gravity bookkeeping and the attraction model.

Gravity is each player's pull toward their own target, bounded by
GRAVITY_LIMITS. Attraction is how close a candidate's artist sits to a
target artist; it does not depend on gravity.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, Mapping, Optional

from src.genre import GenreGraph
from .rules import (
    DEFAULT_PLAYER_GRAVITY,
    GRAVITY_ADJUSTMENTS,
    GRAVITY_LIMITS,
    PLAYER_IDS,
    UNDERDOG_BONUS,
    UNDERDOG_TRIGGER_HIGH,
    UNDERDOG_TRIGGER_LOW,
    opponent_of,
)
from .similarity import ArtistRelationships, compute_artist_similarity
from .types import ArtistProfile, TargetProfile

logger = logging.getLogger(__name__)


def clamp_gravity(value: Any) -> float:
    """Clamp into [min, max]; missing or non-numeric values become the default."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = DEFAULT_PLAYER_GRAVITY
    if math.isnan(number):
        number = DEFAULT_PLAYER_GRAVITY
    return min(GRAVITY_LIMITS.max, max(GRAVITY_LIMITS.min, number))


def normalize_gravities(gravities: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    """Fresh, clamped gravity snapshot covering both players."""
    gravities = gravities or {}
    return {player: clamp_gravity(gravities.get(player)) for player in PLAYER_IDS}


def compute_attraction(
    artist: Optional[ArtistProfile],
    target: Optional[TargetProfile],
    relationships: Optional[ArtistRelationships] = None,
    genre_graph: Optional[GenreGraph] = None,
) -> float:
    """Strict artist similarity of ``artist`` to ``target``; 0.0 when either is unknown."""
    if artist is None or target is None:
        return 0.0
    return compute_artist_similarity(
        target.as_artist_profile(), artist, relationships, genre_graph
    ).score


def apply_gravity_updates(
    gravities: Mapping[str, Any],
    active_player_id: str,
    category: str,
) -> Dict[str, float]:
    """
    Gravities after the active player commits a move of ``category``.

    Returns a new mapping. The picker moves by GRAVITY_ADJUSTMENTS; an
    opponent who has fallen far behind a strong picker gets the underdog
    bonus.
    """
    if category not in GRAVITY_ADJUSTMENTS:
        raise ValueError(f"Unknown move category: {category!r}")
    opponent = opponent_of(active_player_id)
    updated = normalize_gravities(gravities)
    updated[active_player_id] = clamp_gravity(
        updated[active_player_id] + GRAVITY_ADJUSTMENTS[category]
    )
    if updated[active_player_id] > UNDERDOG_TRIGGER_HIGH and updated[opponent] < UNDERDOG_TRIGGER_LOW:
        updated[opponent] = clamp_gravity(updated[opponent] + UNDERDOG_BONUS)
        logger.debug("Underdog bonus applied to %s -> %.2f", opponent, updated[opponent])
    logger.debug(
        "Gravity update (%s, %s): %s",
        active_player_id,
        category,
        ", ".join(f"{p}={g:.2f}" for p, g in updated.items()),
    )
    return updated

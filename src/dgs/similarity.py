"""
Similarity scoring between tracks and between artists.

Track-to-track similarity (``compute_similarity``) drives the diversity
tiers and the target-artist gate. Artist-to-artist similarity
(``compute_artist_similarity``) is what the attraction model measures
against a player's target.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, Mapping, Optional

import numpy as np

from src.genre import GenreGraph, genre_set_similarity
from src.string_utils import normalize_name
from .types import ArtistProfile, TrackFeatureRecord

logger = logging.getLogger(__name__)

ArtistRelationships = Mapping[str, AbstractSet[str]]

# Track similarity weights; components without data on both sides are
# left out and the remaining weights renormalized.
TRACK_SIMILARITY_WEIGHTS: Dict[str, float] = {
    "genre": 0.35,
    "relationship": 0.10,
    "track_popularity": 0.10,
    "duration": 0.10,
    "era": 0.20,
    "artist_popularity": 0.075,
    "followers": 0.075,
}

# Artist similarity weights (attraction)
ARTIST_SIMILARITY_WEIGHTS: Dict[str, float] = {
    "genre": 0.40,
    "relationship": 0.30,
    "artist_popularity": 0.15,
    "followers": 0.15,
}

MAX_DURATION_DIFF_MS = 120_000
MAX_ERA_DIFF_YEARS = 30
FOLLOWER_LOG_SPAN = 3.0
NEUTRAL_COMPONENT = 0.5


@dataclass(frozen=True)
class SimilarityBreakdown:
    score: float
    components: Dict[str, float] = field(default_factory=dict)


def popularity_similarity(pop_a: Optional[float], pop_b: Optional[float]) -> Optional[float]:
    """1.0 for identical popularity, linear down to 0 at 100 points apart."""
    if pop_a is None or pop_b is None:
        return None
    return max(0.0, 1.0 - abs(float(pop_a) - float(pop_b)) / 100.0)


def duration_similarity(duration_a: Optional[int], duration_b: Optional[int]) -> Optional[float]:
    if not duration_a or not duration_b:
        return None
    return 1.0 - min(abs(duration_a - duration_b) / MAX_DURATION_DIFF_MS, 1.0)


def era_similarity(year_a: Optional[int], year_b: Optional[int]) -> Optional[float]:
    if year_a is None or year_b is None:
        return None
    return max(0.0, 1.0 - abs(year_a - year_b) / MAX_ERA_DIFF_YEARS)


def follower_similarity(followers_a: Optional[int], followers_b: Optional[int]) -> Optional[float]:
    """
    Log-scale audience similarity.

    Three orders of magnitude apart (1K vs 1M) scores 0.
    """
    if not followers_a or not followers_b:
        return None
    log_diff = abs(math.log10(max(followers_a, 1)) - math.log10(max(followers_b, 1)))
    return 1.0 - min(log_diff / FOLLOWER_LOG_SPAN, 1.0)


def _related(a: str, b: str, relationships: Optional[ArtistRelationships]) -> bool:
    if not relationships:
        return False
    return b in relationships.get(a, ()) or a in relationships.get(b, ())


def artist_relationship_score(
    artist_a: Optional[str],
    artist_b: Optional[str],
    profile_a: Optional[ArtistProfile],
    profile_b: Optional[ArtistProfile],
    relationships: Optional[ArtistRelationships] = None,
    genre_graph: Optional[GenreGraph] = None,
) -> Optional[float]:
    """
    1.0 for the same or a known related artist; otherwise genre overlap
    scaled into 0.3-1.0. None when there is nothing to compare.
    """
    if artist_a and artist_b:
        if artist_a == artist_b or _related(artist_a, artist_b, relationships):
            return 1.0
    if profile_a is None or profile_b is None:
        return None
    if not profile_a.genres and not profile_b.genres:
        return None
    overlap = genre_set_similarity(profile_a.genres, profile_b.genres, genre_graph).score
    return overlap * 0.7 + 0.3


def _weighted(components: Dict[str, Optional[float]], weights: Dict[str, float]) -> float:
    keys = [k for k, v in components.items() if v is not None]
    if not keys:
        return 0.0
    values = np.array([components[k] for k in keys], dtype=float)
    w = np.array([weights[k] for k in keys], dtype=float)
    return float(np.clip(np.average(values, weights=w), 0.0, 1.0))


def compute_similarity(
    base: TrackFeatureRecord,
    candidate: TrackFeatureRecord,
    artist_profiles: Optional[Mapping[str, ArtistProfile]] = None,
    relationships: Optional[ArtistRelationships] = None,
    genre_graph: Optional[GenreGraph] = None,
) -> SimilarityBreakdown:
    """
    Similarity of a candidate track to the current track, in [0, 1].

    Rewards genre overlap and popularity, duration and era proximity, plus
    artist relationship and audience size when profiles are known. The
    result is symmetric in its two track arguments.
    """
    artist_profiles = artist_profiles or {}
    base_artist = base.primary_artist_id
    cand_artist = candidate.primary_artist_id
    base_profile = artist_profiles.get(base_artist) if base_artist else None
    cand_profile = artist_profiles.get(cand_artist) if cand_artist else None

    genre: Optional[float] = None
    if base.genres or candidate.genres:
        genre = genre_set_similarity(base.genres, candidate.genres, genre_graph).score

    components: Dict[str, Optional[float]] = {
        "genre": genre,
        "relationship": artist_relationship_score(
            base_artist, cand_artist, base_profile, cand_profile, relationships, genre_graph
        ),
        "track_popularity": popularity_similarity(base.popularity, candidate.popularity),
        "duration": duration_similarity(base.duration_ms, candidate.duration_ms),
        "era": era_similarity(base.release_year, candidate.release_year),
        "artist_popularity": popularity_similarity(
            base_profile.popularity if base_profile else None,
            cand_profile.popularity if cand_profile else None,
        ),
        "followers": follower_similarity(
            base_profile.followers if base_profile else None,
            cand_profile.followers if cand_profile else None,
        ),
    }
    score = _weighted(components, TRACK_SIMILARITY_WEIGHTS)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Similarity: %s vs %s | %s | final=%.3f",
            base.name or base.id,
            candidate.name or candidate.id,
            " ".join(f"{k}={v:.3f}" for k, v in components.items() if v is not None),
            score,
        )
    return SimilarityBreakdown(score, {k: v for k, v in components.items() if v is not None})


def _same_artist(a: ArtistProfile, b: ArtistProfile) -> bool:
    if a.id and b.id:
        return a.id == b.id
    return bool(normalize_name(a.name)) and normalize_name(a.name) == normalize_name(b.name)


def compute_artist_similarity(
    base: ArtistProfile,
    candidate: ArtistProfile,
    relationships: Optional[ArtistRelationships] = None,
    genre_graph: Optional[GenreGraph] = None,
) -> SimilarityBreakdown:
    """
    Strict artist-to-artist similarity, ignoring track-level metadata.

    The same artist always scores 1.0. Missing audience data counts as a
    neutral 0.5.
    """
    if _same_artist(base, candidate):
        return SimilarityBreakdown(1.0, {key: 1.0 for key in ARTIST_SIMILARITY_WEIGHTS})

    genre = genre_set_similarity(base.genres, candidate.genres, genre_graph).score
    relationship = artist_relationship_score(
        base.id, candidate.id, base, candidate, relationships, genre_graph
    )
    artist_pop = popularity_similarity(base.popularity, candidate.popularity)
    followers = follower_similarity(base.followers, candidate.followers)

    components = {
        "genre": genre,
        "relationship": NEUTRAL_COMPONENT if relationship is None else relationship,
        "artist_popularity": NEUTRAL_COMPONENT if artist_pop is None else artist_pop,
        "followers": NEUTRAL_COMPONENT if followers is None else followers,
    }
    score = sum(components[k] * w for k, w in ARTIST_SIMILARITY_WEIGHTS.items())
    return SimilarityBreakdown(float(min(max(score, 0.0), 1.0)), components)

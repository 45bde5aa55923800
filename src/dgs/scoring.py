"""
Candidate scoring for one round.

Turns a pool of catalog tracks into ``CandidateMetric``s: similarity to the
current track, attraction toward each player's target, the gravity-weighted
final score, and the round baseline every category is measured against.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from src.genre import GenreGraph
from .gravity import compute_attraction, normalize_gravities
from .identity import track_matches_target
from .metadata import get_popularity_band
from .rules import (
    GRAVITY_BOOST_THRESHOLD,
    OG_CONSTANT,
    PLAYER_IDS,
    get_exploration_phase,
)
from .similarity import ArtistRelationships, compute_similarity
from .types import (
    ArtistProfile,
    CandidateMetric,
    RoundContext,
    TargetProfile,
    TrackFeatureRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolCandidate:
    """A catalog track plus the tag of the search that surfaced it."""
    track: TrackFeatureRecord
    source: str = "recommendations"


def score_floor_ratio(round_number: int) -> float:
    """Fraction of the similarity score a final score may never drop below."""
    if round_number <= 2:
        return 0.4
    if round_number <= 5:
        return 0.15
    return 0.05


def gravity_multiplier(round_number: int) -> float:
    return 0.5 + 0.7 * round_number


def artist_profile_for(
    track: TrackFeatureRecord,
    artist_profiles: Mapping[str, ArtistProfile],
) -> Optional[ArtistProfile]:
    """Catalog profile of the track's primary artist, or one built from the track itself."""
    artist_id = track.primary_artist_id
    if artist_id and artist_id in artist_profiles:
        return artist_profiles[artist_id]
    if not artist_id and not track.primary_artist_name:
        return None
    return ArtistProfile(
        id=artist_id or "",
        name=track.primary_artist_name or "",
        genres=track.genres,
    )


def compute_final_score(
    sim_score: float,
    gravity_score: float,
    og_drift: float,
    round_number: int,
) -> Dict[str, float]:
    stabilized = sim_score * (1.0 - og_drift) + OG_CONSTANT
    final = stabilized + gravity_score * gravity_multiplier(round_number)
    final = max(sim_score * score_floor_ratio(round_number), final)
    return {"stabilized": stabilized, "final": min(1.0, max(0.0, final))}


def score_candidates(
    current_track: TrackFeatureRecord,
    candidates: Sequence[PoolCandidate],
    context: RoundContext,
    artist_profiles: Optional[Mapping[str, ArtistProfile]] = None,
    relationships: Optional[ArtistRelationships] = None,
    genre_graph: Optional[GenreGraph] = None,
) -> List[CandidateMetric]:
    """
    Score every pool candidate for the active player's turn.

    Args:
        current_track: The track that is playing now
        candidates: Pool returned by the catalog collaborator
        context: Round number, active player, targets and gravities
        artist_profiles: Artist id -> profile lookup
        relationships: Artist id -> related artist ids
        genre_graph: Cluster edge table for genre similarity (built-in graph when None)

    Returns:
        Metrics sorted by final score, highest first. Candidates without a
        track id or name are dropped.
    """
    artist_profiles = artist_profiles or {}
    gravities = normalize_gravities(context.gravities)
    active = context.active_player_id
    active_gravity = gravities[active]
    active_target: Optional[TargetProfile] = context.target_for(active)
    phase = get_exploration_phase(context.round_number)

    current_profile = artist_profile_for(current_track, artist_profiles)
    baseline = compute_attraction(current_profile, active_target, relationships, genre_graph)

    metrics: List[CandidateMetric] = []
    skipped = 0
    boosted = 0
    for candidate in candidates:
        track = candidate.track
        if not track.id.strip() or not track.name.strip():
            logger.warning(
                "Skipping candidate with missing track metadata: name=%r id=%r",
                track.name,
                track.id,
            )
            skipped += 1
            continue

        profile = artist_profile_for(track, artist_profiles)
        sim_score = compute_similarity(
            current_track, track, artist_profiles, relationships, genre_graph
        ).score
        a_attraction, b_attraction = (
            compute_attraction(profile, context.target_for(player_id), relationships, genre_graph)
            for player_id in PLAYER_IDS
        )
        active_attraction = a_attraction if active == "player1" else b_attraction

        gravity_score = active_gravity * active_attraction
        if active_gravity >= GRAVITY_BOOST_THRESHOLD and track_matches_target(track, active_target):
            gravity_score *= 1.0 + 2.0 * active_gravity
            boosted += 1

        scores = compute_final_score(sim_score, gravity_score, phase.og_drift, context.round_number)
        metrics.append(
            CandidateMetric(
                track=track,
                source=candidate.source,
                sim_score=sim_score,
                a_attraction=a_attraction,
                b_attraction=b_attraction,
                final_score=scores["final"],
                baseline=baseline,
                popularity_band=get_popularity_band(track.popularity),
                artist_id=track.primary_artist_id,
                artist_name=(profile.name if profile and profile.name else track.primary_artist_name),
                artist_genres=profile.genres if profile else (),
                gravity_score=gravity_score,
                stabilized_score=scores["stabilized"],
            )
        )

    metrics.sort(key=lambda m: m.final_score, reverse=True)
    logger.info(
        "Scored %d candidates (skipped=%d, target_boosted=%d) round=%d phase=%s baseline=%.3f",
        len(metrics),
        skipped,
        boosted,
        context.round_number,
        phase.level,
        baseline,
    )
    return metrics

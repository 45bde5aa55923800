"""
Diversity-constrained selection for one turn.

Pipeline:
    score_candidates        (pool -> CandidateMetric, run_selection_round only)
    filter_target_artists   (early-round target gate)
    categorize_candidates   (adaptive tolerance + backfill)
    select_balanced         (guaranteed minimums, weighted fill to nine)
    correct_categories      (strict relabel, cap, refill)

The engine holds no state between calls. Randomness comes from an injected
``random.Random`` (or one seeded from ``seed``), so a fixed seed reproduces
a fixed result.
"""
from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Any, Dict, Mapping, Optional, Sequence

from src.genre import GenreGraph
from src.logging_utils import RunSummary, stage_timer, truncate_list
from .config import DgsConfig, default_dgs_config
from .corrector import correct_categories
from .diagnostics import DiagnosticSink, LoggingSink
from .diversity import categorize_candidates, filter_target_artists, hard_convergence_active
from .rules import MIN_CANDIDATE_POOL, similarity_tier
from .scoring import PoolCandidate, score_candidates
from .selection import select_balanced
from .similarity import ArtistRelationships
from .types import (
    ArtistProfile,
    CandidateMetric,
    RoundContext,
    SelectionResult,
    TrackFeatureRecord,
)

logger = logging.getLogger(__name__)


def _resolve_rng(rng: Optional[random.Random], seed: Optional[int]) -> random.Random:
    if rng is not None:
        return rng
    return random.Random(seed)


def apply_diversity_constraints(
    metrics: Sequence[CandidateMetric],
    context: RoundContext,
    *,
    config: Optional[DgsConfig] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    sink: Optional[DiagnosticSink] = None,
) -> SelectionResult:
    """
    Choose up to nine artist-distinct options with a best-effort 3/3/3 split.

    Args:
        metrics: Scored candidates for this round
        context: Round number, active player, targets and gravity snapshot
        config: Tunables (defaults to the game rules)
        rng: Random source for the weighted category draw
        seed: Seed for a fresh random source when ``rng`` is not given
        sink: Diagnostic event sink (defaults to logging)

    Returns:
        SelectionResult whose metrics carry their corrected selection_category.
        Short pools produce short results; nothing here raises for lack of data.
    """
    config = config or default_dgs_config()
    sink = sink or LoggingSink()
    rng = _resolve_rng(rng, seed)
    active = context.active_player_id

    if len(metrics) < MIN_CANDIDATE_POOL:
        sink.info("small_pool", candidates=len(metrics), healthy=MIN_CANDIDATE_POOL)

    filtered = filter_target_artists(metrics, context, config, sink)
    categorized = categorize_candidates(filtered.kept, context, config, sink)
    picks = select_balanced(categorized.buckets, config, rng, sink)
    corrected = correct_categories(picks, filtered.kept, active, config, sink)

    selected = tuple(c.metric.with_category(c.category) for c in corrected)
    tiers = Counter(similarity_tier(m.sim_score) for m in selected)
    diagnostics: Dict[str, Any] = {
        "round": context.round_number,
        "active_player": active,
        "hard_convergence": hard_convergence_active(context, config),
        "input_candidates": len(metrics),
        "filtered_candidates": len(filtered.kept),
        "target_artists_allowed": filtered.allowed_targets,
        "tolerance": categorized.tolerance,
        "skewed": categorized.skewed,
        "pool_sizes": categorized.pool_sizes(),
        "expanded": dict(categorized.expanded),
        "quality": {c: q.score for c, q in categorized.quality.items()},
        "similarity_tiers": {tier: tiers.get(tier, 0) for tier in ("low", "medium", "high")},
    }
    result = SelectionResult(
        selected=selected,
        filtered_artist_names=filtered.filtered_artist_names,
        diagnostics=diagnostics,
    )
    diagnostics["category_counts"] = result.category_counts()
    logger.debug(
        "Selection round %d (%s): %d selected from %d candidates",
        context.round_number,
        active,
        len(selected),
        len(metrics),
    )
    return result


def run_selection_round(
    current_track: TrackFeatureRecord,
    candidates: Sequence[PoolCandidate],
    context: RoundContext,
    *,
    artist_profiles: Optional[Mapping[str, ArtistProfile]] = None,
    relationships: Optional[ArtistRelationships] = None,
    genre_graph: Optional[GenreGraph] = None,
    config: Optional[DgsConfig] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    sink: Optional[DiagnosticSink] = None,
) -> SelectionResult:
    """Score a candidate pool and select this turn's options."""
    summary = RunSummary(f"Round {context.round_number}", logger)
    with stage_timer("Candidate scoring", logger):
        metrics = score_candidates(
            current_track,
            candidates,
            context,
            artist_profiles=artist_profiles,
            relationships=relationships,
            genre_graph=genre_graph,
        )
    with stage_timer("Diversity selection", logger):
        result = apply_diversity_constraints(
            metrics, context, config=config, rng=rng, seed=seed, sink=sink
        )

    summary.add("active_player", context.active_player_id)
    summary.add("candidates", len(candidates))
    summary.add("scored", len(metrics))
    summary.add("filtered_target_artists", len(result.filtered_artist_names))
    summary.add("tolerance", float(result.diagnostics["tolerance"]))
    for category, count in result.category_counts().items():
        summary.add(f"{category}_options", count)
    summary.add("selected", len(result))
    summary.log()
    if result.filtered_artist_names:
        logger.info(
            "Held back target artists this round: %s",
            truncate_list(sorted(result.filtered_artist_names)),
        )
    return result

"""
Target filtering and relative categorization.

The stages here run before the balanced fill:

1. Drop early-round target-artist candidates that are too far from the
   current track (unless the round or the player's gravity lifts the gate).
2. Bucket survivors into closer / neutral / further by their attraction
   delta from the baseline, with a tolerance that shrinks on flat pools.
3. Backfill any bucket below its guaranteed minimum from the global delta
   ranking, reporting each bucket's quality along the way.

Nothing here mutates a ``CandidateMetric``; buckets hold
``CategorizedCandidate`` pairs.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Sequence, Set, Tuple

from .config import DgsConfig
from .diagnostics import DiagnosticSink
from .gravity import normalize_gravities
from .identity import matches_target
from .rules import CATEGORIES, PLAYER_IDS
from .types import CandidateMetric, CategorizedCandidate, RoundContext

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "Unknown"


@dataclass(frozen=True)
class TargetFilterResult:
    kept: Tuple[CandidateMetric, ...]
    filtered_artist_names: FrozenSet[str] = frozenset()
    allowed_targets: int = 0


def hard_convergence_active(context: RoundContext, config: DgsConfig) -> bool:
    if context.force_hard_convergence is not None:
        return context.force_hard_convergence
    return context.round_number >= config.target_filter.hard_convergence_round


def _target_players(metric: CandidateMetric, context: RoundContext) -> List[str]:
    """Every player whose target is this candidate's artist."""
    artist_id = metric.artist_id or metric.track.primary_artist_id
    artist_name = metric.artist_name or metric.track.primary_artist_name
    return [
        player_id
        for player_id in PLAYER_IDS
        if matches_target(artist_id, artist_name, context.target_for(player_id))
    ]


def filter_target_artists(
    metrics: Sequence[CandidateMetric],
    context: RoundContext,
    config: DgsConfig,
    sink: DiagnosticSink,
) -> TargetFilterResult:
    """
    Keep target-artist candidates out of early rounds unless they fit the
    current track.

    A candidate whose artist is either player's target passes when the round
    has reached the boost round, when the gravity of any player targeting
    that artist has reached the override threshold, or when its similarity
    to the current track exceeds the threshold. Hard convergence skips the
    filter entirely.
    """
    if hard_convergence_active(context, config):
        sink.info("target_filter_bypassed", round=context.round_number, candidates=len(metrics))
        return TargetFilterResult(kept=tuple(metrics))

    rules = config.target_filter
    gravities = normalize_gravities(context.gravities)
    kept: List[CandidateMetric] = []
    filtered: Set[str] = set()
    allowed = 0

    for metric in metrics:
        players = _target_players(metric, context)
        if not players:
            kept.append(metric)
            continue

        name = metric.artist_name or UNKNOWN_ARTIST
        # A shared target passes if either player's gravity has reached the override
        player_id = max(players, key=lambda p: gravities[p])
        gravity = gravities[player_id]
        if context.round_number >= rules.boost_round:
            reason = "round"
        elif gravity >= rules.gravity_override:
            reason = "gravity"
        elif metric.sim_score > rules.similarity_threshold:
            reason = "similarity"
        else:
            filtered.add(name)
            sink.info(
                "target_artist_filtered",
                artist=name,
                player=",".join(players),
                sim=metric.sim_score,
                gravity=gravity,
                round=context.round_number,
            )
            continue

        allowed += 1
        kept.append(metric)
        sink.info(
            "target_artist_allowed",
            artist=name,
            player=player_id,
            reason=reason,
            sim=metric.sim_score,
            gravity=gravity,
            round=context.round_number,
        )

    return TargetFilterResult(tuple(kept), frozenset(filtered), allowed)


def adaptive_tolerance(diffs: Sequence[float], config: DgsConfig) -> float:
    """
    Neutral band half-width for this pool.

    Flat distributions (diff range under ``flat_range``) get a tolerance of
    ``max(adaptive_floor, range * adaptive_ratio)``; everything else uses
    the fixed neutral tolerance.
    """
    cfg = config.categorization
    if not diffs:
        return cfg.neutral_tolerance
    spread = max(diffs) - min(diffs)
    if spread < cfg.flat_range:
        return max(cfg.adaptive_floor, spread * cfg.adaptive_ratio)
    return cfg.neutral_tolerance


@dataclass(frozen=True)
class CategoryQuality:
    score: float
    avg_delta: float
    artist_diversity: float
    band_spread: float
    genre_variety: float
    size: int


def category_quality(members: Sequence[CategorizedCandidate]) -> CategoryQuality:
    """
    Weighted quality of a bucket: mean delta magnitude (0.4), artist
    diversity (0.3), popularity-band spread (0.15), genre variety (0.15).
    """
    if not members:
        return CategoryQuality(0.0, 0.0, 0.0, 0.0, 0.0, 0)
    n = len(members)
    avg_delta = sum(c.diff for c in members) / n
    artists = {c.metric.artist_id or c.metric.artist_name or c.metric.track.id for c in members}
    bands = {c.metric.popularity_band for c in members}
    genres = {g for c in members for g in c.metric.artist_genres}
    artist_diversity = len(artists) / n
    band_spread = len(bands) / 3
    genre_variety = min(1.0, len(genres) / n)
    score = abs(avg_delta) * 0.4 + artist_diversity * 0.3 + band_spread * 0.15 + genre_variety * 0.15
    return CategoryQuality(score, avg_delta, artist_diversity, band_spread, genre_variety, n)


@dataclass(frozen=True)
class CategorizationResult:
    buckets: Dict[str, Tuple[CategorizedCandidate, ...]]
    tolerance: float
    skewed: bool = False
    quality: Dict[str, CategoryQuality] = field(default_factory=dict)
    expanded: Dict[str, int] = field(default_factory=dict)

    def pool_sizes(self) -> Dict[str, int]:
        return {category: len(self.buckets.get(category, ())) for category in CATEGORIES}


def _pair(metric: CandidateMetric, category: str, diff: float) -> CategorizedCandidate:
    return CategorizedCandidate(metric=metric, category=category, diff=diff)


def _relabel(ranked: Sequence[Tuple[CandidateMetric, float]], category: str) -> List[CategorizedCandidate]:
    return [_pair(m, category, d) for m, d in ranked]


def categorize_candidates(
    metrics: Sequence[CandidateMetric],
    context: RoundContext,
    config: DgsConfig,
    sink: DiagnosticSink,
) -> CategorizationResult:
    """
    Bucket candidates relative to the baseline and backfill short buckets.

    Buckets may share candidates after backfill; artist uniqueness during
    selection keeps a shared candidate from being picked twice.
    """
    active = context.active_player_id
    cap = config.selection.per_category_cap
    minimums = config.selection.guaranteed_minimums
    thresholds = config.quality_thresholds

    ordered = sorted(metrics, key=lambda m: m.final_score, reverse=True)
    ranked = sorted(((m, m.diff_for(active)) for m in ordered), key=lambda pair: pair[1], reverse=True)
    diffs = [d for _, d in ranked]
    tolerance = adaptive_tolerance(diffs, config)
    n = len(ranked)
    third = max(cap, n // 3)

    sink.info(
        "tolerance_selected",
        tolerance=tolerance,
        adaptive=tolerance != config.categorization.neutral_tolerance,
        candidates=n,
        diff_min=min(diffs) if diffs else 0.0,
        diff_max=max(diffs) if diffs else 0.0,
    )

    ascending = sorted(ranked, key=lambda pair: pair[1])
    closer = _relabel([p for p in ranked if p[1] > tolerance][:third], "closer")
    further = _relabel([p for p in ascending if p[1] < -tolerance][:third], "further")
    neutral = _relabel([p for p in ranked if abs(p[1]) <= tolerance], "neutral")

    expanded: Dict[str, int] = {}
    skewed = False
    backfill_size = cap * 2

    if len(closer) < minimums["closer"] and ranked:
        quality = category_quality(closer)
        if quality.score < thresholds["closer"]:
            sink.warn("category_quality_low", category="closer", quality=quality.score, size=len(closer))
        members = {id(c.metric) for c in closer}
        extra = [p for p in ranked[: max(third, backfill_size)] if id(p[0]) not in members]
        extra = extra[: max(0, backfill_size - len(closer))]
        closer += _relabel(extra, "closer")
        expanded["closer"] = len(extra)
        if diffs[0] <= 0:
            skewed = True
            sink.warn("skewed_distribution", category="closer", added=len(extra), max_diff=diffs[0])
        else:
            sink.info("category_expanded", category="closer", added=len(extra), size=len(closer))

    if len(further) < minimums["further"] and ranked:
        quality = category_quality(further)
        if abs(quality.avg_delta) < thresholds["further"]:
            sink.warn(
                "category_quality_low",
                category="further",
                avg_delta=quality.avg_delta,
                size=len(further),
            )
        members = {id(c.metric) for c in further}
        extra = [p for p in ascending[: max(third, backfill_size)] if id(p[0]) not in members]
        extra = extra[: max(0, backfill_size - len(further))]
        further += _relabel(extra, "further")
        expanded["further"] = len(extra)
        if diffs[-1] >= 0:
            skewed = True
            sink.warn("skewed_distribution", category="further", added=len(extra), min_diff=diffs[-1])
        else:
            sink.info("category_expanded", category="further", added=len(extra), size=len(further))

    if len(neutral) < minimums["neutral"] and ranked:
        quality = category_quality(neutral)
        if quality.score < thresholds["neutral"]:
            sink.warn("category_quality_low", category="neutral", quality=quality.score, size=len(neutral))
        taken = {id(c.metric) for c in closer} | {id(c.metric) for c in further}
        members = {id(c.metric) for c in neutral}
        remaining = sorted(
            (p for p in ranked if id(p[0]) not in taken and id(p[0]) not in members),
            key=lambda pair: abs(pair[1]),
        )[: max(cap, third)]
        before = len(neutral)
        neutral = (neutral + _relabel(remaining, "neutral"))[:third]
        expanded["neutral"] = len(neutral) - before
        sink.info("category_expanded", category="neutral", added=expanded["neutral"], size=len(neutral))

    buckets = {"closer": tuple(closer), "neutral": tuple(neutral), "further": tuple(further)}
    quality_by_category = {category: category_quality(members) for category, members in buckets.items()}
    sink.info("category_counts", stage="categorized", **{c: len(b) for c, b in buckets.items()})
    return CategorizationResult(
        buckets=buckets,
        tolerance=tolerance,
        skewed=skewed,
        quality=quality_by_category,
        expanded=expanded,
    )

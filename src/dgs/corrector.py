"""
Category correction.

Backfill and weighted selection can leave a label that disagrees with the
sign of a candidate's attraction delta. This pass relabels every pick with
the fixed neutral tolerance, trims each category to its cap, and refills
any shortfall from the filtered pool. Its output is what the caller sees.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from .config import DgsConfig
from .diagnostics import DiagnosticSink
from .identity import ArtistIdentityRegistry
from .rules import CATEGORIES, calculate_move_category
from .types import CandidateMetric, CategorizedCandidate

logger = logging.getLogger(__name__)


def strict_categorize(
    metric: CandidateMetric,
    active_player_id: str,
    tolerance: float,
) -> CategorizedCandidate:
    attraction = metric.attraction_for(active_player_id)
    return CategorizedCandidate(
        metric=metric,
        category=calculate_move_category(attraction, metric.baseline, tolerance),
        diff=attraction - metric.baseline,
    )


def _ordered(groups: Dict[str, List[CategorizedCandidate]]) -> List[CategorizedCandidate]:
    result: List[CategorizedCandidate] = []
    for category in CATEGORIES:
        result.extend(sorted(groups[category], key=lambda c: c.metric.final_score, reverse=True))
    return result


def correct_categories(
    selected: Sequence[CategorizedCandidate],
    pool: Sequence[CandidateMetric],
    active_player_id: str,
    config: DgsConfig,
    sink: DiagnosticSink,
) -> List[CategorizedCandidate]:
    """
    Relabel, cap and refill the selection.

    Refill first respects the per-category cap; if that cannot reach the
    display count, the cap is relaxed and the result is reported as only
    partially balanced. Artist uniqueness holds throughout.

    Returns:
        Corrected picks ordered closer, neutral, further, each by final score.
    """
    tolerance = config.categorization.neutral_tolerance
    cap = config.selection.per_category_cap
    target = config.selection.display_count

    relabeled = [strict_categorize(c.metric, active_player_id, tolerance) for c in selected]
    mismatches = sum(1 for before, after in zip(selected, relabeled) if before.category != after.category)
    if mismatches:
        sink.info("categorization_mismatch", relabeled=mismatches, selected=len(selected))

    groups: Dict[str, List[CategorizedCandidate]] = {category: [] for category in CATEGORIES}
    for candidate in sorted(relabeled, key=lambda c: c.metric.final_score, reverse=True):
        if len(groups[candidate.category]) < cap:
            groups[candidate.category].append(candidate)

    registry = ArtistIdentityRegistry()
    used = set()
    for candidate in _ordered(groups):
        registry.register(candidate.metric)
        used.add(id(candidate.metric))

    def kept_count() -> int:
        return sum(len(members) for members in groups.values())

    if kept_count() < target:
        remaining = [
            strict_categorize(m, active_player_id, tolerance)
            for m in sorted(pool, key=lambda m: m.final_score, reverse=True)
            if id(m) not in used
        ]
        for candidate in remaining:
            if kept_count() >= target:
                break
            if len(groups[candidate.category]) >= cap:
                continue
            if registry.try_register(candidate.metric):
                groups[candidate.category].append(candidate)
                used.add(id(candidate.metric))

        if kept_count() < target:
            relaxed = 0
            for candidate in remaining:
                if kept_count() >= target:
                    break
                if id(candidate.metric) in used:
                    continue
                if registry.try_register(candidate.metric):
                    groups[candidate.category].append(candidate)
                    used.add(id(candidate.metric))
                    relaxed += 1
            if relaxed:
                sink.warn(
                    "balance_partial",
                    relaxed=relaxed,
                    **{category: len(members) for category, members in groups.items()},
                )

    if kept_count() < target:
        sink.error(
            "correction_shortfall",
            message="critical: category correction could not reach target count",
            selected=kept_count(),
            target=target,
            pool=len(pool),
        )

    corrected = _ordered(groups)
    sink.info("category_counts", stage="corrected", **{c: len(m) for c, m in groups.items()})
    return corrected

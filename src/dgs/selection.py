from __future__ import annotations

import logging
import random
from typing import Dict, List, Mapping, Optional, Sequence

from .config import DgsConfig
from .diagnostics import DiagnosticSink
from .identity import ArtistIdentityRegistry
from .rules import CATEGORIES
from .types import CategorizedCandidate

logger = logging.getLogger(__name__)


def _by_final_score(members: Sequence[CategorizedCandidate]) -> List[CategorizedCandidate]:
    return sorted(members, key=lambda c: c.metric.final_score, reverse=True)


def _best_available(
    members: Sequence[CategorizedCandidate],
    registry: ArtistIdentityRegistry,
) -> Optional[CategorizedCandidate]:
    for candidate in members:
        if not registry.collides(candidate.metric):
            return candidate
    return None


def choose_category(
    eligible: Sequence[str],
    weights: Mapping[str, float],
    rng: random.Random,
) -> str:
    """
    Weighted pick among ``eligible`` categories.

    Walks the raw (not renormalized) cumulative weights; when the draw
    lands past the eligible total, the first eligible category wins.
    """
    draw = rng.random()
    cumulative = 0.0
    for category in eligible:
        cumulative += weights.get(category, 0.0)
        if draw <= cumulative:
            return category
    return eligible[0]


def select_balanced(
    buckets: Mapping[str, Sequence[CategorizedCandidate]],
    config: DgsConfig,
    rng: random.Random,
    sink: DiagnosticSink,
    registry: Optional[ArtistIdentityRegistry] = None,
) -> List[CategorizedCandidate]:
    """
    Fill the option set from the category buckets.

    Phase A takes up to each category's guaranteed minimum from its best
    final scores. Phase B draws weighted categories until the display count
    is reached or no category under its cap has an uncollided candidate.
    Every pick must pass the artist identity registry.
    """
    selection_cfg = config.selection
    registry = registry or ArtistIdentityRegistry()
    ranked: Dict[str, List[CategorizedCandidate]] = {
        category: _by_final_score(buckets.get(category, ())) for category in CATEGORIES
    }
    counts = {category: 0 for category in CATEGORIES}
    selected: List[CategorizedCandidate] = []

    # Phase A
    for category in CATEGORIES:
        minimum = selection_cfg.guaranteed_minimums.get(category, 0)
        for candidate in ranked[category][:minimum]:
            if len(selected) >= selection_cfg.display_count:
                break
            if registry.try_register(candidate.metric):
                selected.append(candidate)
                counts[category] += 1

    # Phase B
    while len(selected) < selection_cfg.display_count:
        eligible = [
            category
            for category in CATEGORIES
            if counts[category] < selection_cfg.per_category_cap
            and _best_available(ranked[category], registry) is not None
        ]
        if not eligible:
            sink.warn(
                "selection_stopped_short",
                selected=len(selected),
                target=selection_cfg.display_count,
                **counts,
            )
            break
        category = choose_category(eligible, selection_cfg.category_weights, rng)
        candidate = _best_available(ranked[category], registry)
        registry.register(candidate.metric)
        selected.append(candidate)
        counts[category] += 1

    sink.info("category_counts", stage="selected", **counts)
    return selected

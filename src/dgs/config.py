from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from . import rules


@dataclass(frozen=True)
class SelectionConfig:
    display_count: int
    per_category_cap: int
    guaranteed_minimums: Mapping[str, int]
    category_weights: Mapping[str, float]


@dataclass(frozen=True)
class CategorizationConfig:
    neutral_tolerance: float
    adaptive_floor: float
    adaptive_ratio: float
    flat_range: float


@dataclass(frozen=True)
class TargetFilterConfig:
    similarity_threshold: float
    boost_round: int
    gravity_override: float
    hard_convergence_round: int


@dataclass(frozen=True)
class DgsConfig:
    selection: SelectionConfig
    categorization: CategorizationConfig
    target_filter: TargetFilterConfig
    quality_thresholds: Mapping[str, float]


def _section(overrides: Mapping[str, Any], name: str) -> Dict[str, Any]:
    section = overrides.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"dgs.{name} must be a mapping, got {type(section).__name__}")
    return dict(section)


def _per_category(value: Any, defaults: Mapping[str, Any], key: str) -> Dict[str, Any]:
    if value is None:
        return dict(defaults)
    if not isinstance(value, Mapping):
        raise ValueError(f"{key} must map categories to values")
    unknown = set(value) - set(rules.CATEGORIES)
    if unknown:
        raise ValueError(f"{key} has unknown categories: {sorted(unknown)}")
    merged = dict(defaults)
    merged.update(value)
    return merged


def default_dgs_config(overrides: Optional[Mapping[str, Any]] = None) -> DgsConfig:
    """
    Selection tunables, defaulting to the game rules.

    Args:
        overrides: Optional dict from config.yaml ``dgs`` section with keys
            'selection', 'categorization', 'target_filter', 'quality'

    Raises:
        ValueError: On counts that cannot be met, weights not summing to 1,
            or thresholds outside their range.
    """
    if overrides is None:
        overrides = {}
    selection = _section(overrides, "selection")
    categorization = _section(overrides, "categorization")
    target_filter = _section(overrides, "target_filter")
    quality = _section(overrides, "quality")

    selection_cfg = SelectionConfig(
        display_count=int(selection.get("display_count", rules.DISPLAY_OPTION_COUNT)),
        per_category_cap=int(selection.get("per_category_cap", rules.TRACKS_PER_CATEGORY)),
        guaranteed_minimums=_per_category(
            selection.get("guaranteed_minimums"), rules.GUARANTEED_MINIMUMS, "selection.guaranteed_minimums"
        ),
        category_weights=_per_category(
            selection.get("category_weights"), rules.CATEGORY_WEIGHTS, "selection.category_weights"
        ),
    )
    if selection_cfg.display_count <= 0:
        raise ValueError("selection.display_count must be positive")
    if selection_cfg.per_category_cap <= 0:
        raise ValueError("selection.per_category_cap must be positive")
    for category, minimum in selection_cfg.guaranteed_minimums.items():
        if int(minimum) < 0 or int(minimum) > selection_cfg.per_category_cap:
            raise ValueError(
                f"selection.guaranteed_minimums.{category}={minimum} must be within [0, per_category_cap]"
            )
    weights = selection_cfg.category_weights
    if any(float(w) < 0 for w in weights.values()):
        raise ValueError("selection.category_weights must be non-negative")
    if abs(sum(float(w) for w in weights.values()) - 1.0) > 0.01:
        raise ValueError(f"selection.category_weights must sum to 1.0, got {sum(weights.values()):.3f}")

    categorization_cfg = CategorizationConfig(
        neutral_tolerance=float(categorization.get("neutral_tolerance", rules.NEUTRAL_TOLERANCE)),
        adaptive_floor=float(categorization.get("adaptive_floor", rules.ADAPTIVE_TOLERANCE_FLOOR)),
        adaptive_ratio=float(categorization.get("adaptive_ratio", rules.ADAPTIVE_TOLERANCE_RATIO)),
        flat_range=float(categorization.get("flat_range", rules.FLAT_DISTRIBUTION_RANGE)),
    )
    for name in ("neutral_tolerance", "adaptive_floor", "adaptive_ratio", "flat_range"):
        if getattr(categorization_cfg, name) < 0:
            raise ValueError(f"categorization.{name} must be non-negative")

    target_cfg = TargetFilterConfig(
        similarity_threshold=float(
            target_filter.get("similarity_threshold", rules.TARGET_SIMILARITY_THRESHOLD)
        ),
        boost_round=int(target_filter.get("boost_round", rules.TARGET_BOOST_ROUND)),
        gravity_override=float(target_filter.get("gravity_override", rules.GRAVITY_OVERRIDE_THRESHOLD)),
        hard_convergence_round=int(
            target_filter.get("hard_convergence_round", rules.HARD_CONVERGENCE_ROUND)
        ),
    )
    if not 0.0 <= target_cfg.similarity_threshold <= 1.0:
        raise ValueError("target_filter.similarity_threshold must be within [0, 1]")
    if target_cfg.boost_round < 1 or target_cfg.hard_convergence_round < 1:
        raise ValueError("target_filter rounds must be >= 1")
    if not rules.GRAVITY_LIMITS.min <= target_cfg.gravity_override <= rules.GRAVITY_LIMITS.max:
        raise ValueError(
            f"target_filter.gravity_override must be within "
            f"[{rules.GRAVITY_LIMITS.min}, {rules.GRAVITY_LIMITS.max}]"
        )

    quality_thresholds = _per_category(quality, rules.MIN_QUALITY_THRESHOLDS, "quality")

    return DgsConfig(
        selection=selection_cfg,
        categorization=categorization_cfg,
        target_filter=target_cfg,
        quality_thresholds={k: float(v) for k, v in quality_thresholds.items()},
    )

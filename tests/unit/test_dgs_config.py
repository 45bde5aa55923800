import pytest

from src.dgs.config import default_dgs_config
from src.dgs.engine import apply_diversity_constraints


def test_defaults_match_game_rules():
    config = default_dgs_config()
    assert config.selection.display_count == 9
    assert config.selection.per_category_cap == 3
    assert dict(config.selection.guaranteed_minimums) == {"closer": 3, "neutral": 3, "further": 3}
    assert dict(config.selection.category_weights) == {"closer": 0.34, "neutral": 0.33, "further": 0.33}
    assert config.categorization.neutral_tolerance == 0.02
    assert config.categorization.adaptive_floor == 0.015
    assert config.target_filter.boost_round == 8
    assert config.target_filter.gravity_override == pytest.approx(0.70)
    assert config.target_filter.hard_convergence_round == 10
    assert dict(config.quality_thresholds) == {"closer": 0.15, "neutral": 0.05, "further": 0.10}


def test_partial_overrides_merge_with_defaults():
    config = default_dgs_config(
        {
            "selection": {"category_weights": {"closer": 0.5, "neutral": 0.25, "further": 0.25}},
            "target_filter": {"boost_round": 10, "gravity_override": 0.59},
            "quality": {"closer": 0.2},
        }
    )
    assert config.selection.category_weights["closer"] == 0.5
    assert config.target_filter.boost_round == 10
    assert config.target_filter.gravity_override == 0.59
    assert config.quality_thresholds["closer"] == 0.2
    assert config.quality_thresholds["neutral"] == 0.05


@pytest.mark.parametrize(
    "overrides",
    [
        {"selection": {"display_count": 0}},
        {"selection": {"per_category_cap": 2}},
        {"selection": {"category_weights": {"closer": 0.9}}},
        {"selection": {"category_weights": {"sideways": 0.1}}},
        {"categorization": {"neutral_tolerance": -0.1}},
        {"target_filter": {"similarity_threshold": 1.5}},
        {"target_filter": {"gravity_override": 0.9}},
        {"target_filter": {"boost_round": 0}},
        {"selection": ["not", "a", "mapping"]},
    ],
)
def test_invalid_overrides_raise(overrides):
    with pytest.raises(ValueError):
        default_dgs_config(overrides)


def test_superseded_thresholds_can_be_configured(metric_factory, round_context):
    metric = metric_factory("t1", artist_id="artist_1", artist_name="Target Artist", sim_score=0.1)
    config = default_dgs_config({"target_filter": {"boost_round": 10, "gravity_override": 0.59}})
    at_eight = apply_diversity_constraints([metric], round_context(round_number=8), config=config, seed=1)
    assert len(at_eight) == 0
    high_gravity = apply_diversity_constraints(
        [metric], round_context(round_number=2, gravity=0.6), config=config, seed=1
    )
    assert len(high_gravity) == 1

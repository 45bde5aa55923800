import logging

from src.dgs.diagnostics import LoggingSink, RecordingSink


def test_recording_sink_keeps_events_in_order():
    sink = RecordingSink()
    sink.info("tolerance_selected", tolerance=0.02)
    sink.warn("category_quality_low", category="closer", quality=0.1)
    sink.error("correction_shortfall", selected=4, target=9)

    assert [e.event for e in sink.events] == ["tolerance_selected", "category_quality_low", "correction_shortfall"]
    assert [e.level for e in sink.events] == ["info", "warn", "error"]
    assert sink.named("category_quality_low")[0].fields == {"category": "closer", "quality": 0.1}
    assert sink.has("correction_shortfall", "error")
    assert not sink.has("correction_shortfall", "info")


def test_logging_sink_forwards_levels(caplog):
    log = logging.getLogger("test_dgs_sink")
    sink = LoggingSink(log)
    with caplog.at_level(logging.INFO, logger="test_dgs_sink"):
        sink.info("category_counts", closer=3, neutral=3, further=3)
        sink.warn("skewed_distribution", max_diff=-0.125)
        sink.error("correction_shortfall", selected=2)

    levels = [r.levelno for r in caplog.records]
    assert levels == [logging.INFO, logging.WARNING, logging.ERROR]
    assert "category_counts closer=3 neutral=3 further=3" in caplog.records[0].getMessage()
    assert "max_diff=-0.125" in caplog.records[1].getMessage()


def test_engine_emits_through_logging_by_default(pool_factory, round_context, caplog):
    from src.dgs.engine import apply_diversity_constraints

    with caplog.at_level(logging.INFO, logger="src.dgs.diagnostics"):
        apply_diversity_constraints(pool_factory(4), round_context(), seed=1)
    messages = [r.getMessage() for r in caplog.records if r.name == "src.dgs.diagnostics"]
    assert any(m.startswith("tolerance_selected") for m in messages)
    assert any(m.startswith("category_counts") for m in messages)

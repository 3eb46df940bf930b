import json
import logging

from observability.logging import (
    LOG_FILE_NAME,
    ContextFilter,
    JsonFormatter,
    TextFormatter,
    clear_context,
    set_phase,
    set_run_context,
    setup_logging,
)
from observability.tracing import trace_operation


def make_record(message="Discovery complete | trends=%d", args=(2,)):
    record = logging.LogRecord("pipeline", logging.INFO, __file__, 10, message, args, None)
    ContextFilter().filter(record)
    return record


def test_context_filter_injects_run_and_phase(restore_root_logger):
    set_run_context("abc12345", "discovering")
    set_phase("ready")

    record = make_record()

    assert record.run_id == "abc12345"
    assert record.phase == "ready"


def test_json_formatter_includes_context_and_extras(restore_root_logger):
    set_run_context("abc12345", "drafting")
    record = make_record()
    record.topic = "Quantum Leap"

    data = json.loads(JsonFormatter().format(record))

    assert data["message"] == "Discovery complete | trends=2"
    assert data["run_id"] == "abc12345"
    assert data["phase"] == "drafting"
    assert data["topic"] == "Quantum Leap"


def test_text_formatter_shows_run_context(restore_root_logger):
    clear_context()

    line = TextFormatter().format(make_record())

    assert "[INFO] [-:-] pipeline: Discovery complete | trends=2" in line


def test_setup_logging_writes_log_file(config, restore_root_logger):
    assert setup_logging(config) is True

    logging.getLogger("pipeline").info("Scan complete")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "Scan complete" in (config.log_dir / LOG_FILE_NAME).read_text(encoding="utf-8")


def test_trace_operation_without_logfire_yields_attrs():
    with trace_operation("discovery", {"category": "Technology"}) as attrs:
        attrs["trends"] = 3

    assert attrs == {"trends": 3}

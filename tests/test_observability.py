import io
import json
import logging
import sys

import pytest

from deck_monitor.detection.session import MonitoringSession
from deck_monitor.observability.export import export_session_json
from deck_monitor.observability.logging import (
    JsonFormatter,
    fields,
    get_logger,
    setup_logging,
)
from deck_monitor.observability.metrics import SessionMetrics
from deck_monitor.providers.json_document import DictDocumentProvider

from deck_factory import MutableDeck, three_slide_deck


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_formatter():
    formatter = JsonFormatter()
    log_record = logging.LogRecord(
        name="test_logger",
        level=logging.INFO,
        pathname="test.py",
        lineno=10,
        msg="test message",
        args=(),
        exc_info=None,
    )
    log_record.extra_fields = {"event": "poll", "change_count": 2}

    formatted = formatter.format(log_record)
    data = json.loads(formatted)

    assert data["message"] == "test message"
    assert data["level"] == "INFO"
    assert data["component"] == "test_logger"
    assert data["event"] == "poll"
    assert data["change_count"] == 2
    assert "timestamp" in data


def test_json_formatter_keeps_core_keys_and_ignores_other_attributes():
    formatter = JsonFormatter()
    log_record = logging.LogRecord(
        "test_logger", logging.WARNING, "test.py", 1, "kept", (), None
    )
    log_record.extra_fields = {"message": "overridden", "slide_id": "s1"}
    log_record.unrelated = "dropped"

    data = json.loads(formatter.format(log_record))

    assert data["message"] == "kept"
    assert data["slide_id"] == "s1"
    assert "unrelated" not in data


def test_json_formatter_includes_exception():
    formatter = JsonFormatter()
    try:
        raise ValueError("bad reader")
    except ValueError:
        record = logging.LogRecord(
            "x", logging.ERROR, "f.py", 1, "failed", (), sys.exc_info()
        )
    data = json.loads(formatter.format(record))
    assert "bad reader" in data["exception"]


def test_setup_logging(restore_root_logger):
    stream = io.StringIO()
    setup_logging("debug", stream=stream)

    get_logger("deck_monitor.test").info(
        "setup test", extra=fields(test="ok")
    )

    data = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert data["message"] == "setup test"
    assert data["test"] == "ok"
    assert restore_root_logger.level == logging.DEBUG
    assert len(restore_root_logger.handlers) == 1


def test_setup_logging_reads_env(restore_root_logger, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    setup_logging(stream=io.StringIO())
    assert restore_root_logger.level == logging.WARNING


def test_get_logger():
    logger = get_logger("my_name")
    assert logger.name == "my_name"
    assert isinstance(logger, logging.Logger)


class TestSessionMetrics:
    def test_counters_and_markdown(self):
        metrics = SessionMetrics()
        assert metrics.render_markdown() == "No metrics yet."

        metrics.inc("polls")
        metrics.inc("polls", 2)

        assert metrics.get("polls") == 3
        assert metrics.get("missing") == 0
        assert "- **polls**: 3" in metrics.render_markdown()

        metrics.reset()
        assert metrics.counters == {}


class TestExport:
    def test_export_contains_snapshot_and_changes(self):
        deck = MutableDeck(three_slide_deck())
        session = MonitoringSession(DictDocumentProvider(deck))
        session.initialize()
        deck.element(0, "e1")["content"] = "changed"
        session.detect_changes()

        payload = json.loads(export_session_json(session))

        assert payload["state"] == "monitoring"
        assert payload["snapshotCount"] == 2
        assert payload["latestSnapshot"]["slides"][0]["elements"][0]["content"] == "changed"
        assert [c["changeType"] for c in payload["changes"]] == [
            "text_content_changed"
        ]
        assert payload["metrics"]["polls"] == 1

    def test_export_of_empty_session(self):
        session = MonitoringSession(DictDocumentProvider(three_slide_deck()))
        payload = json.loads(export_session_json(session))
        assert payload["latestSnapshot"] is None
        assert payload["changes"] == []

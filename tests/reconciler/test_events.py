"""Tests for structured reconciler events."""

import logging

from gphotos_reconcile.reconciler.errors import RenameError, RollbackError, classify_error
from gphotos_reconcile.reconciler.events import LoggingEventSink, RecordingEventSink, emit


class TestLoggingEventSink:
    """Tests for LoggingEventSink."""

    def test_fields_attached_as_extra(self, caplog):
        sink = LoggingEventSink(logging.getLogger("test.events"))

        with caplog.at_level(logging.DEBUG, logger="test.events"):
            emit(sink, "rename_rolled_back", logging.INFO, "Rolled back", restored="/p/a.jpg")

        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.extra_fields == {"event": "rename_rolled_back", "restored": "/p/a.jpg"}
        assert "/p/a.jpg" in record.getMessage()

    def test_none_sink_uses_logging(self, caplog):
        with caplog.at_level(logging.WARNING, logger="gphotos_reconcile.reconciler"):
            emit(None, "diagnostic_mismatch", logging.WARNING, "Mismatch", chunk_id=3)

        assert any(getattr(r, "extra_fields", {}).get("chunk_id") == 3 for r in caplog.records)


def test_recording_sink():
    sink = RecordingEventSink()
    emit(sink, "a", logging.INFO, "first")
    emit(sink, "b", logging.ERROR, "second", x=1)
    emit(sink, "a", logging.INFO, "third")

    assert sink.names() == ["a", "b", "a"]
    assert [e.message for e in sink.of("a")] == ["first", "third"]
    assert sink.of("b")[0].fields == {"x": 1}


def test_classify_error():
    assert classify_error(RollbackError("x")) == 'rollback'
    assert classify_error(RenameError("x")) == 'rename'
    assert classify_error(PermissionError()) == 'permission'
    assert classify_error(FileNotFoundError()) == 'not_found'
    assert classify_error(FileExistsError()) == 'exists'
    assert classify_error(OSError()) == 'io'
    assert classify_error(ValueError()) == 'unknown'

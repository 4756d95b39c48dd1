"""Tests for standardized error handling."""

import pytest
from gphotos_reconcile.common import (
    ReconcileError, FileProcessingError, ToolNotFoundError, ParseError
)
from gphotos_reconcile.reconciler.errors import (
    ReconcilerError, RenameError, RollbackError, classify_error
)


class TestStandardizedErrors:
    """Test standardized error types."""

    def test_base_error_keeps_message_and_context(self):
        error = ReconcileError("Test error", file_path="/test/path")

        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.context == {"file_path": "/test/path"}

    def test_common_error_inheritance(self):
        assert isinstance(ParseError("bad", file_path="/x"), FileProcessingError)
        assert isinstance(ToolNotFoundError("missing", tool_name="exiftool"), ReconcileError)

    def test_reconciler_error_inheritance(self):
        for error_class in (RenameError, RollbackError):
            error = error_class("failed", source="/a", target="/b")
            assert isinstance(error, ReconcilerError)
            assert isinstance(error, ReconcileError)
            assert error.context == {"source": "/a", "target": "/b"}


class TestClassifyError:
    """Tests for classify_error."""

    @pytest.mark.parametrize("exception, category", [
        (RollbackError("x"), 'rollback'),
        (RenameError("x"), 'rename'),
        (PermissionError("x"), 'permission'),
        (FileNotFoundError("x"), 'not_found'),
        (FileExistsError("x"), 'exists'),
        (OSError("x"), 'io'),
        (ValueError("x"), 'unknown'),
    ])
    def test_categories(self, exception, category):
        assert classify_error(exception) == category

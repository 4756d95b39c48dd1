"""Base error definitions for gphotos_reconcile packages."""

from typing import Any, Dict


class ReconcileError(Exception):
    """Base exception for all gphotos_reconcile errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class FileProcessingError(ReconcileError):
    """Base exception for file processing errors."""
    pass


class ToolNotFoundError(FileProcessingError):
    """Required external tool is not available."""
    pass


class ParseError(FileProcessingError):
    """Error parsing file metadata."""
    pass

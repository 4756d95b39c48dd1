"""Common utilities for gphotos_reconcile packages."""

from .config import ConfigLoader
from .logging import setup_logging
from .logging_config import LoggingConfig
from .errors import (
    ReconcileError, FileProcessingError, ToolNotFoundError, ParseError
)
from .path_utils import (
    FileIdentity, canonicalize, comparison_key, nfc, normalize_path
)

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'ReconcileError',
    'FileProcessingError',
    'ToolNotFoundError',
    'ParseError',
    'FileIdentity',
    'canonicalize',
    'comparison_key',
    'nfc',
    'normalize_path',
]

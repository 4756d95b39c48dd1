"""Error classes for the reconciler."""

from gphotos_reconcile.common import ReconcileError


class ReconcilerError(ReconcileError):
    """Base error for reconciliation operations."""
    pass


class RenameError(ReconcilerError):
    """A rename step failed or its post-condition did not hold."""
    pass


class RollbackError(ReconcilerError):
    """Undoing an applied rename step failed; manual cleanup is required."""
    pass


def classify_error(exception: Exception) -> str:
    """
    Classify an exception into an error category for events and counters.

    Args:
        exception: The exception to classify

    Returns:
        Error category string: 'rollback', 'rename', 'permission', 'not_found',
        'exists', 'io' or 'unknown'
    """
    if isinstance(exception, RollbackError):
        return 'rollback'
    elif isinstance(exception, RenameError):
        return 'rename'
    elif isinstance(exception, PermissionError):
        return 'permission'
    elif isinstance(exception, FileNotFoundError):
        return 'not_found'
    elif isinstance(exception, FileExistsError):
        return 'exists'
    elif isinstance(exception, OSError):
        return 'io'
    else:
        return 'unknown'

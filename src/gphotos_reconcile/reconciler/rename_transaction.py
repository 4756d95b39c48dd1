"""Paired rename of a media file and its JSON sidecar.

Both files are renamed or neither is. Applied steps go onto a stack; on any
failure the stack is unwound in reverse order. A failed undo is reported as
``manual_cleanup_required`` and never raised, so one bad record cannot stop a
collection-wide run.
"""

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import RenameError, RollbackError, classify_error
from .events import EventSink, emit
from .filesystem import Filesystem, LOCAL_FILESYSTEM
from .models import FileEntry


class RenameStatus(enum.Enum):
    SUCCESS = "success"
    TARGET_EXISTS = "target_exists"
    RENAME_FAILED = "rename_failed"


@dataclass(frozen=True)
class RenameStep:
    """A single-file rename."""
    label: str
    source: Path
    target: Path


@dataclass
class RenameResult:
    """Outcome of a paired rename.

    Attributes:
        status: RenameStatus
        error: Failure that triggered rollback (RENAME_FAILED only)
        rollback_errors: Undo steps that failed; non-empty means manual cleanup
    """
    status: RenameStatus
    error: Optional[Exception] = None
    rollback_errors: List[RollbackError] = field(default_factory=list)

    @property
    def needs_manual_cleanup(self) -> bool:
        return bool(self.rollback_errors)


class RenameTransaction:
    """Rename a media file and its sidecar as one unit.

    Created immediately before the first rename and discarded afterwards.
    Never share an instance between concurrent operations on the same record.
    """

    def __init__(
        self,
        media_path: Path | str,
        new_media_path: Path | str,
        sidecar_path: Path | str,
        new_sidecar_path: Path | str,
        filesystem: Filesystem = LOCAL_FILESYSTEM,
        sink: Optional[EventSink] = None,
    ) -> None:
        self.steps = [
            RenameStep("media", Path(media_path), Path(new_media_path)),
            RenameStep("sidecar", Path(sidecar_path), Path(new_sidecar_path)),
        ]
        self.applied: List[RenameStep] = []
        self.filesystem = filesystem
        self.sink = sink

    @property
    def media_step(self) -> RenameStep:
        return self.steps[0]

    @property
    def sidecar_step(self) -> RenameStep:
        return self.steps[1]

    def existing_target(self) -> Optional[Path]:
        """First rename target that already exists, if any."""
        for step in self.steps:
            if self.filesystem.exists(step.target):
                return step.target
        return None

    def apply(self, entry: FileEntry) -> RenameResult:
        """Run the transaction and point ``entry`` at the new media path.

        Args:
            entry: File entry whose source_path is updated on success

        Returns:
            RenameResult; SUCCESS only once ``entry`` reflects the new path
        """
        blocking = self.existing_target()
        if blocking is not None:
            emit(
                self.sink, "rename_target_exists", logging.DEBUG,
                "Skipped rename, target already exists",
                media=str(self.media_step.source), target=str(blocking),
            )
            return RenameResult(RenameStatus.TARGET_EXISTS)

        try:
            for step in self.steps:
                self._apply_step(step)
            entry.source_path = self.media_step.target
        except (OSError, RenameError) as e:
            emit(
                self.sink, "rename_failed", logging.ERROR,
                "Paired rename failed, rolling back",
                media=str(self.media_step.source), sidecar=str(self.sidecar_step.source),
                error=str(e), category=classify_error(e),
            )
            return RenameResult(RenameStatus.RENAME_FAILED, error=e, rollback_errors=self.rollback())

        emit(
            self.sink, "rename_applied", logging.DEBUG,
            "Renamed media file and sidecar",
            old=self.media_step.source.name, new=self.media_step.target.name,
        )
        return RenameResult(RenameStatus.SUCCESS)

    def _apply_step(self, step: RenameStep) -> None:
        self.filesystem.rename(step.source, step.target)
        # Pushed before verification so a rename with a broken
        # post-condition is still undone
        self.applied.append(step)
        if not self.filesystem.exists(step.target):
            raise RenameError(
                f"{step.label.capitalize()} file does not exist after rename: {step.target}",
                source=str(step.source), target=str(step.target),
            )

    def rollback(self) -> List[RollbackError]:
        """Undo applied steps in reverse order; report, never raise."""
        failures: List[RollbackError] = []

        while self.applied:
            step = self.applied.pop()
            try:
                if not self.filesystem.exists(step.target):
                    raise RenameError(f"Renamed {step.label} file is missing: {step.target}")
                self.filesystem.rename(step.target, step.source)
            except (OSError, RenameError) as e:
                failures.append(RollbackError(
                    f"Failed to restore {step.label} file: {e}",
                    source=str(step.source), target=str(step.target),
                ))
                continue
            emit(
                self.sink, "rename_rolled_back", logging.INFO,
                f"Rolled back {step.label} file rename",
                restored=str(step.source),
            )

        if failures:
            emit(
                self.sink, "manual_cleanup_required", logging.CRITICAL,
                "Rollback of paired rename failed, manual cleanup required",
                original_media=str(self.media_step.source),
                original_sidecar=str(self.sidecar_step.source),
                errors=[f.message for f in failures],
            )
        return failures


def apply_paired_rename(
    media_path: Path | str,
    new_media_path: Path | str,
    sidecar_path: Path | str,
    new_sidecar_path: Path | str,
    entry: FileEntry,
    filesystem: Filesystem = LOCAL_FILESYSTEM,
    sink: Optional[EventSink] = None,
) -> RenameResult:
    """Rename a media file and its sidecar together, with rollback.

    Returns TARGET_EXISTS without touching anything when either destination
    exists. See RenameTransaction.
    """
    transaction = RenameTransaction(
        media_path, new_media_path, sidecar_path, new_sidecar_path,
        filesystem=filesystem, sink=sink,
    )
    return transaction.apply(entry)

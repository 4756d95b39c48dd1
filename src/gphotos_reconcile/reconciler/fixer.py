"""Collection-wide truncated filename fixer.

For every file entry of every record:

1. find the JSON sidecar (tryhard lookup by default),
2. compare the filename with the sidecar ``title``,
3. on a confirmed truncation rename the media file and the sidecar together
   and point the entry at the new path.

Run it after date extraction (the sidecar pairing is known to work) and
before files are moved. Nothing here stops the run: every outcome is counted
in TruncationFixSummary.
"""

import enum
import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .events import EventSink, emit
from .filesystem import Filesystem, LOCAL_FILESYSTEM
from .models import FileEntry, MediaRecord
from .progress import ProgressTracker
from .rename_transaction import RenameStatus, RenameTransaction
from .sidecar_matcher import find_sidecar, sidecar_target_path
from .summary import TruncationFixSummary
from .truncation import ResolveStatus, resolve

logger = logging.getLogger(__name__)


class FixStatus(enum.Enum):
    FIXED = "fixed"
    NO_SIDECAR = "no_sidecar"
    NO_TITLE = "no_title"
    NOT_TRUNCATED = "not_truncated"
    TARGET_EXISTS = "target_exists"
    RENAME_FAILED = "rename_failed"


class TruncatedFilenameFixer:
    """Restore truncated media filenames from sidecar titles."""

    def __init__(
        self,
        tryhard: bool = True,
        filesystem: Filesystem = LOCAL_FILESYSTEM,
        sink: Optional[EventSink] = None,
        progress_log_interval: int = 100,
    ) -> None:
        self.tryhard = tryhard
        self.filesystem = filesystem
        self.sink = sink
        self.progress_log_interval = progress_log_interval

    def fix(self, records: Sequence[MediaRecord]) -> TruncationFixSummary:
        """Fix truncated filenames across a collection.

        Args:
            records: Media records; their entries are updated in place

        Returns:
            TruncationFixSummary with per-outcome counters
        """
        summary = TruncationFixSummary()
        tracker = ProgressTracker(
            total=len(records),
            log_interval=self.progress_log_interval,
            label="Checking truncated names",
        )

        logger.info(f"Checking for truncated filenames: {{'records': {len(records)}}}")

        for record in records:
            for entry in record.entries():
                self._count(summary, self.fix_entry(entry, summary))
            tracker.increment()

        if summary.fixed:
            logger.info(f"Fixed truncated filenames: {{'fixed': {summary.fixed}}}")
        else:
            logger.info("No truncated filenames found")
        logger.debug(f"Truncated filename check details: {summary.to_dict()}")

        return summary

    def fix_entry(self, entry: FileEntry, summary: Optional[TruncationFixSummary] = None) -> FixStatus:
        """Check one file entry and rename it when truncated.

        Args:
            entry: File entry to check; source_path changes on FIXED
            summary: Summary whose manual_cleanup counter is bumped when a
                rollback fails

        Returns:
            FixStatus
        """
        media_path = entry.as_path()

        sidecar = find_sidecar(media_path, tryhard=self.tryhard, filesystem=self.filesystem)
        if sidecar is None:
            return FixStatus.NO_SIDECAR

        resolution = resolve(media_path, sidecar, filesystem=self.filesystem)
        if resolution.status is ResolveStatus.NO_TITLE:
            return FixStatus.NO_TITLE
        if resolution.status is ResolveStatus.NOT_TRUNCATED:
            return FixStatus.NOT_TRUNCATED

        new_name = resolution.corrected_name
        new_media_path = media_path.parent / new_name
        new_sidecar_path = sidecar_target_path(sidecar, new_name)

        transaction = RenameTransaction(
            media_path, new_media_path, sidecar, new_sidecar_path,
            filesystem=self.filesystem, sink=self.sink,
        )
        result = transaction.apply(entry)

        if result.status is RenameStatus.TARGET_EXISTS:
            return FixStatus.TARGET_EXISTS
        if result.status is RenameStatus.RENAME_FAILED:
            if result.needs_manual_cleanup and summary is not None:
                summary.manual_cleanup += 1
            return FixStatus.RENAME_FAILED

        emit(
            self.sink, "truncated_name_fixed", logging.DEBUG,
            "Fixed truncated filename",
            old=media_path.name, new=new_name,
        )
        return FixStatus.FIXED

    @staticmethod
    def _count(summary: TruncationFixSummary, status: FixStatus) -> None:
        summary.checked += 1
        setattr(summary, status.value, getattr(summary, status.value) + 1)


def fix_truncated_filenames(
    records: Iterable[MediaRecord],
    tryhard: bool = True,
    sink: Optional[EventSink] = None,
) -> TruncationFixSummary:
    """Convenience wrapper around TruncatedFilenameFixer.fix()."""
    return TruncatedFilenameFixer(tryhard=tryhard, sink=sink).fix(list(records))


def records_from_paths(paths: Iterable[Path | str]) -> list[MediaRecord]:
    """Wrap plain media paths as single-file MediaRecords."""
    return [MediaRecord(path) for path in paths]

"""ExifTool process adapter for BatchWriter.

Runs one ``exiftool`` invocation per chunk with tag arguments supplied by the
caller. Which tags to write is decided elsewhere; this adapter only starts the
process and hands back its exit status and stderr.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from gphotos_reconcile.common import ToolNotFoundError

from .batch_writer import BatchWriter, WriteAttempt
from .config import ReconcilerConfig
from .events import EventSink
from .models import FileEntry

logger = logging.getLogger(__name__)

EXIFTOOL_INSTALL_INSTRUCTIONS = (
    "ExifTool is required for metadata writes. Install it:\n"
    "  - Windows: Download from https://exiftool.org/\n"
    "  - macOS: brew install exiftool\n"
    "  - Linux: sudo apt-get install libimage-exiftool-perl"
)


def find_exiftool() -> Optional[str]:
    """Return the exiftool executable path, or None."""
    return shutil.which('exiftool')


def require_exiftool() -> str:
    """
    Return the exiftool executable path.

    Raises:
        ToolNotFoundError: If exiftool is not on PATH, with installation instructions
    """
    executable = find_exiftool()
    if executable is None:
        logger.error("Tool not found: {'tool': 'exiftool', 'required': True}")
        raise ToolNotFoundError(
            f"Tool 'exiftool' is not available.\n\n{EXIFTOOL_INSTALL_INSTRUCTIONS}",
            tool_name='exiftool',
        )
    logger.info("Tool available: {'tool': 'exiftool', 'capability': 'batch metadata write'}")
    return executable


class ExifToolWriter:
    """Callable writer: ``writer(entries) -> WriteAttempt``."""

    def __init__(
        self,
        tag_args: Callable[[Sequence[FileEntry]], List[str]],
        executable: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        """
        Args:
            tag_args: Builds the tag arguments (e.g. ["-DateTimeOriginal=..."]) for a chunk
            executable: exiftool path (looked up on PATH when omitted)
            timeout_seconds: Optional subprocess timeout
        """
        self.tag_args = tag_args
        self.executable = executable or require_exiftool()
        self.timeout_seconds = timeout_seconds

    def build_command(self, entries: Sequence[FileEntry]) -> List[str]:
        return [
            self.executable,
            '-overwrite_original',
            *self.tag_args(entries),
            *(str(Path(entry.source_path)) for entry in entries),
        ]

    def __call__(self, entries: Sequence[FileEntry]) -> WriteAttempt:
        command = self.build_command(entries)
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            stderr = e.stderr.decode('utf-8', 'replace') if isinstance(e.stderr, bytes) else (e.stderr or "")
            logger.warning(f"ExifTool timed out: {{'files': {len(entries)}, 'timeout': {self.timeout_seconds}}}")
            return WriteAttempt(ok=False, diagnostics=stderr)

        if completed.returncode != 0:
            logger.debug(f"ExifTool reported failures: {{'files': {len(entries)}, 'returncode': {completed.returncode}}}")
        return WriteAttempt(ok=completed.returncode == 0, diagnostics=completed.stderr or "")


def build_exiftool_batch_writer(
    config: ReconcilerConfig,
    tag_args: Callable[[Sequence[FileEntry]], List[str]],
    executable: Optional[str] = None,
    sink: Optional[EventSink] = None,
) -> BatchWriter[FileEntry]:
    """Create a BatchWriter that runs exiftool per chunk using reconciler settings.

    Args:
        config: Reconciler settings (chunk size, failure line format, timeout)
        tag_args: Builds the tag arguments for a chunk
        executable: exiftool path (looked up on PATH when omitted)
        sink: Event sink for retry decisions

    Raises:
        ToolNotFoundError: If no executable is given and exiftool is not on PATH
    """
    writer = ExifToolWriter(
        tag_args,
        executable=executable,
        timeout_seconds=config.exiftool_timeout_seconds,
    )
    return BatchWriter(
        writer,
        chunk_size=config.chunk_size,
        markers=config.failure_markers,
        separator=config.diagnostic_separator,
        trailing=config.diagnostic_trailing,
        sink=sink,
    )

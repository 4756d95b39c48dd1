"""Extraction of failed file paths from write-tool diagnostics.

ExifTool reports per-file failures on stderr as

    Error: File not writable - /photos/Birthday Party - 2022/img.jpg

The " - " between message and path also occurs in album names, so the path
starts at the FIRST separator after the marker and runs to the end of the
line, or to the last occurrence of an optional trailing token (for tools that
append e.g. " (skipped)" after the path). Splitting at the last separator would yield "2022/img.jpg", which never
matches a queued file.
"""

import logging
from typing import Iterable, Optional, Set

from gphotos_reconcile.common import FileIdentity, canonicalize

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MARKERS = ("Error:",)
DEFAULT_SEPARATOR = " - "


def extract_path_from_line(
    line: str,
    markers: Iterable[str] = DEFAULT_FAILURE_MARKERS,
    separator: str = DEFAULT_SEPARATOR,
    trailing: Optional[str] = None,
) -> str | None:
    """Return the raw path reported on one diagnostic line, or None.

    Args:
        line: One line of diagnostic output
        markers: Literal failure markers (e.g. "Error:")
        separator: Literal token between message and path
        trailing: Optional literal token ending the path; the path is cut at
            its last occurrence and runs to the end of the line when absent

    Returns:
        Path text after the first separator following the earliest marker
    """
    positions = [(line.find(marker), marker) for marker in markers if marker]
    positions = [(pos, marker) for pos, marker in positions if pos >= 0]
    if not positions:
        return None

    pos, marker = min(positions)
    sep = line.find(separator, pos + len(marker))
    if sep < 0:
        return None

    path = line[sep + len(separator):]
    if trailing:
        end = path.rfind(trailing)
        if end >= 0:
            path = path[:end]
    path = path.strip()
    return path or None


def extract_failed_paths(
    diagnostic_text: str,
    markers: Iterable[str] = DEFAULT_FAILURE_MARKERS,
    separator: str = DEFAULT_SEPARATOR,
    trailing: Optional[str] = None,
) -> Set[FileIdentity]:
    """Collect the identities of files reported as failed.

    Unix absolute, Windows drive-letter and relative paths are all accepted.
    An empty result is a valid outcome (no recognizable failure line); callers
    must not read it as an extraction crash.

    Args:
        diagnostic_text: Raw multi-line diagnostic output
        markers: Literal failure markers
        separator: Literal token between message and path
        trailing: Optional literal token ending the path

    Returns:
        Set of canonical identities, one per distinct path
    """
    markers = tuple(markers)
    failed: Set[FileIdentity] = set()

    for line in (diagnostic_text or "").splitlines():
        raw = extract_path_from_line(line, markers, separator, trailing)
        if raw is None:
            continue
        failed.add(canonicalize(raw))

    if failed:
        logger.debug(f"Failed paths extracted: {{'count': {len(failed)}}}")
    return failed

"""Truncated filename fix summary."""

from dataclasses import asdict, dataclass
from typing import Dict


@dataclass
class TruncationFixSummary:
    """Counters of one truncated filename fix run.

    ``checked`` counts every file entry examined (primary and secondaries);
    each checked entry lands in exactly one of fixed, no_sidecar, no_title,
    not_truncated, target_exists or rename_failed. ``manual_cleanup`` is the
    subset of rename_failed whose rollback also failed.
    """
    fixed: int = 0
    checked: int = 0
    no_sidecar: int = 0
    no_title: int = 0
    not_truncated: int = 0
    target_exists: int = 0
    rename_failed: int = 0
    manual_cleanup: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def format_summary_human_readable(summary: TruncationFixSummary) -> str:
    """
    Format summary as human-readable text.

    Args:
        summary: Summary from TruncatedFilenameFixer.fix()

    Returns:
        Formatted text report
    """
    lines = []

    lines.append("=" * 50)
    lines.append("TRUNCATED FILENAME FIX SUMMARY")
    lines.append("=" * 50)
    lines.append(f"Files checked:       {summary.checked:>8,}")
    lines.append(f"Fixed:               {summary.fixed:>8,}")
    lines.append(f"No JSON sidecar:     {summary.no_sidecar:>8,}")
    lines.append(f"No title in JSON:    {summary.no_title:>8,}")
    lines.append(f"Not truncated:       {summary.not_truncated:>8,}")
    lines.append(f"Target exists:       {summary.target_exists:>8,}")
    lines.append(f"Rename failed:       {summary.rename_failed:>8,}")
    if summary.manual_cleanup:
        lines.append("")
        lines.append(f"MANUAL CLEANUP REQUIRED for {summary.manual_cleanup:,} file(s); see error log")
    lines.append("=" * 50)

    return "\n".join(lines)

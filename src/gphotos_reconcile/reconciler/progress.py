"""Progress tracking for reconciliation runs.

Tracks and reports progress with ETA calculation.
"""

import logging
import time

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Tracks records processed and logs rate and ETA every N records."""

    def __init__(self, total: int, log_interval: int = 100, label: str = "Reconciling"):
        """Initialize progress tracker.

        Args:
            total: Total number of records to process
            log_interval: Log progress every N records
            label: Prefix of progress log lines
        """
        self.total = total
        self.log_interval = max(1, log_interval)
        self.label = label

        self.processed = 0
        self.start_time = time.time()

    def increment(self, count: int = 1) -> None:
        """Increment processed counter, logging on interval boundaries and at the end."""
        self.processed += count

        if self.processed % self.log_interval == 0 or self.processed == self.total:
            self._log_progress()

    def get_progress(self) -> dict:
        """Get current progress statistics.

        Returns:
            Dict with progress metrics
        """
        elapsed = time.time() - self.start_time
        rate = self.processed / elapsed if elapsed > 0 else 0.0
        percentage = (self.processed / self.total) * 100 if self.total > 0 else 0.0
        remaining = max(0, self.total - self.processed)
        eta = remaining / rate if rate > 0 and remaining > 0 else 0.0

        return {
            "total": self.total,
            "processed": self.processed,
            "remaining": remaining,
            "percentage": percentage,
            "elapsed_seconds": elapsed,
            "rate_per_sec": rate,
            "eta_seconds": eta,
        }

    def _log_progress(self) -> None:
        progress = self.get_progress()
        logger.info(
            f"{self.label}: {self.processed}/{self.total} "
            f"({progress['percentage']:.1f}%) - "
            f"{progress['rate_per_sec']:.1f}/sec - "
            f"ETA: {format_duration(progress['eta_seconds'])}"
        )


def format_duration(seconds: float) -> str:
    """Format seconds as human-readable time (e.g. "2h 15m 30s")."""
    if seconds <= 0:
        return "0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")

    return " ".join(parts)

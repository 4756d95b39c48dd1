"""Chunked batch writes with diagnostic-driven retries.

The writer is an external collaborator (for example ExifToolWriter): it
receives a sequence of members and returns a WriteAttempt with its raw
diagnostics. This module owns the pending queue and feeds each failed
attempt through extract_failed_paths and plan_retry until the queue is empty.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Generic, Iterable, List, Optional, Sequence, TypeVar

from gphotos_reconcile.common import FileIdentity

from .diagnostics import DEFAULT_FAILURE_MARKERS, DEFAULT_SEPARATOR, extract_failed_paths
from .events import EventSink, emit
from .retry_queue import RetryVerdict, WriteChunk, default_identity, plan_retry

logger = logging.getLogger(__name__)

M = TypeVar('M')


@dataclass(frozen=True)
class WriteAttempt:
    """Result of one external write call.

    Attributes:
        ok: True when the tool reported success for every file
        diagnostics: Raw diagnostic text (stderr)
    """
    ok: bool
    diagnostics: str = ""


@dataclass
class BatchWriteReport(Generic[M]):
    """Per-member outcome of a batch write."""
    written: List[M] = field(default_factory=list)
    failed: List[M] = field(default_factory=list)
    unresolved: List[M] = field(default_factory=list)
    attempts: int = 0
    verdicts: Dict[str, int] = field(default_factory=dict)

    @property
    def mismatched_chunks(self) -> int:
        return self.verdicts.get(RetryVerdict.DIAGNOSTIC_MISMATCH.value, 0)

    def to_dict(self) -> Dict[str, int]:
        return {
            'written': len(self.written),
            'failed': len(self.failed),
            'unresolved': len(self.unresolved),
            'attempts': self.attempts,
            'mismatched_chunks': self.mismatched_chunks,
        }


def make_chunks(members: Sequence[M], chunk_size: int) -> List[WriteChunk[M]]:
    """Split members into WriteChunks of at most ``chunk_size``."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [
        WriteChunk(chunk_id=i, members=tuple(members[start:start + chunk_size]))
        for i, start in enumerate(range(0, len(members), chunk_size))
    ]


class BatchWriter(Generic[M]):
    """Drive chunked writes until every member is written or settled."""

    def __init__(
        self,
        write: Callable[[Sequence[M]], WriteAttempt],
        chunk_size: int = 50,
        markers: Iterable[str] = DEFAULT_FAILURE_MARKERS,
        separator: str = DEFAULT_SEPARATOR,
        trailing: Optional[str] = None,
        identity_of: Callable[[M], FileIdentity] = default_identity,
        sink: Optional[EventSink] = None,
    ) -> None:
        self.write = write
        self.chunk_size = chunk_size
        self.markers = tuple(markers)
        self.separator = separator
        self.trailing = trailing
        self.identity_of = identity_of
        self.sink = sink

    def run(self, members: Sequence[M]) -> BatchWriteReport[M]:
        """Write all members.

        Terminates: each round either removes a chunk or replaces it with a
        smaller-or-equal chunk whose members have not been retried before.
        """
        report: BatchWriteReport[M] = BatchWriteReport()
        queue: Deque[WriteChunk[M]] = deque(make_chunks(list(members), self.chunk_size))

        while queue:
            chunk = queue.popleft()
            report.attempts += 1

            try:
                attempt = self.write(chunk.members)
            except Exception as e:
                # The writer is external; its crash ends this chunk only
                logger.exception(f"Writer raised: {{'chunk_id': {chunk.chunk_id}, 'round': {chunk.round}, 'error': {str(e)!r}}}")
                emit(
                    self.sink, "writer_crashed", logging.ERROR,
                    "Batch writer raised, chunk marked failed",
                    chunk_id=chunk.chunk_id, members=len(chunk), error=str(e),
                )
                report.failed.extend(chunk.members)
                self._count(report, "writer_crashed")
                continue

            if attempt.ok:
                report.written.extend(chunk.members)
                self._count(report, RetryVerdict.SUCCEEDED.value)
                continue

            fingerprints = extract_failed_paths(
                attempt.diagnostics, self.markers, self.separator, self.trailing
            )
            decision = plan_retry(
                chunk, fingerprints, attempt.diagnostics,
                identity_of=self.identity_of, sink=self.sink,
            )
            self._count(report, decision.verdict.value)

            report.written.extend(decision.written)
            report.failed.extend(decision.failed)
            report.unresolved.extend(decision.unresolved)
            if decision.pending is not None:
                queue.append(decision.pending)

        logger.info(f"Batch write complete: {report.to_dict()}")
        return report

    @staticmethod
    def _count(report: BatchWriteReport, verdict: str) -> None:
        report.verdicts[verdict] = report.verdicts.get(verdict, 0) + 1

"""Retry planning for chunks of a batch write.

Given a chunk and the identities extracted from its failure diagnostics, work
out what (if anything) goes back on the queue. The queue itself belongs to the
batch writer; this module only computes the next pending subset.

Guarantees:
- a chunk is re-enqueued only with members named in the diagnostics,
- every identity is re-enqueued at most once,
- diagnostics naming none of the chunk's members end the chunk
  (DIAGNOSTIC_MISMATCH) instead of re-queuing it unchanged forever.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Generic, Iterable, Optional, Set, Tuple, TypeVar

from gphotos_reconcile.common import FileIdentity, canonicalize

from .events import EventSink, emit

M = TypeVar('M')


class RetryVerdict(enum.Enum):
    SUCCEEDED = "succeeded"
    UNDETERMINED = "undetermined"
    DIAGNOSTIC_MISMATCH = "diagnostic_mismatch"
    RETRY = "retry"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class WriteChunk(Generic[M]):
    """A batch unit submitted to one external write call.

    Attributes:
        chunk_id: Stable id of the original chunk (kept across retries)
        members: Pending members
        round: 0 for the first attempt, +1 per retry
        retried: Identities already re-enqueued once
    """
    chunk_id: int
    members: Tuple[M, ...]
    round: int = 0
    retried: FrozenSet[FileIdentity] = field(default_factory=frozenset)

    def __len__(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class RetryDecision(Generic[M]):
    """What to do with a chunk after a failed write attempt.

    Attributes:
        verdict: RetryVerdict
        pending: Chunk to re-enqueue, or None when the chunk is done
        written: Members considered written
        failed: Members failed for good (terminal)
        unresolved: Members whose outcome cannot be determined
    """
    verdict: RetryVerdict
    pending: Optional[WriteChunk[M]] = None
    written: Tuple[M, ...] = ()
    failed: Tuple[M, ...] = ()
    unresolved: Tuple[M, ...] = ()


def default_identity(member) -> FileIdentity:
    identity = getattr(member, 'identity', None)
    if isinstance(identity, FileIdentity):
        return identity
    return canonicalize(member)


def plan_retry(
    chunk: WriteChunk[M],
    fingerprints: Iterable[FileIdentity],
    diagnostic_text: str = "",
    identity_of: Callable[[M], FileIdentity] = default_identity,
    sink: Optional[EventSink] = None,
) -> RetryDecision[M]:
    """Compute the next pending subset of a chunk whose write reported failure.

    Args:
        chunk: The chunk that was written
        fingerprints: Identities extracted from the write's diagnostics
        diagnostic_text: Raw diagnostics, used to tell "no failures" from
            "failures we could not attribute"
        identity_of: Maps a member to its FileIdentity (defaults to the
            member's ``identity`` attribute, else canonicalize(member))
        sink: Event sink

    Returns:
        RetryDecision; ``pending`` is never larger than ``chunk``
    """
    fingerprint_set: Set[FileIdentity] = set(fingerprints)

    if not fingerprint_set:
        if diagnostic_text.strip():
            emit(
                sink, "diagnostics_unparseable", logging.WARNING,
                "Write failed but diagnostics name no file; chunk not retried",
                chunk_id=chunk.chunk_id, members=len(chunk), round=chunk.round,
            )
            return RetryDecision(RetryVerdict.UNDETERMINED, unresolved=chunk.members)
        return RetryDecision(RetryVerdict.SUCCEEDED, written=chunk.members)

    matched = [m for m in chunk.members if identity_of(m) in fingerprint_set]
    written = tuple(m for m in chunk.members if identity_of(m) not in fingerprint_set)

    if not matched:
        emit(
            sink, "diagnostic_mismatch", logging.WARNING,
            "Diagnostics name files outside the chunk; chunk marked failed",
            chunk_id=chunk.chunk_id, members=len(chunk), round=chunk.round,
            reported=sorted(f.path for f in fingerprint_set)[:10],
        )
        return RetryDecision(RetryVerdict.DIAGNOSTIC_MISMATCH, failed=chunk.members)

    retry = tuple(m for m in matched if identity_of(m) not in chunk.retried)
    exhausted = tuple(m for m in matched if identity_of(m) in chunk.retried)

    if exhausted:
        emit(
            sink, "retry_exhausted", logging.WARNING,
            "Files failed again after a retry",
            chunk_id=chunk.chunk_id, files=[str(identity_of(m)) for m in exhausted],
        )

    if not retry:
        return RetryDecision(RetryVerdict.EXHAUSTED, written=written, failed=exhausted)

    pending = WriteChunk(
        chunk_id=chunk.chunk_id,
        members=retry,
        round=chunk.round + 1,
        retried=chunk.retried | frozenset(identity_of(m) for m in retry),
    )
    return RetryDecision(RetryVerdict.RETRY, pending=pending, written=written, failed=exhausted)

"""Tests for retry planning of failed write chunks."""

import logging

from gphotos_reconcile.common import canonicalize
from gphotos_reconcile.reconciler.events import RecordingEventSink
from gphotos_reconcile.reconciler.models import FileEntry
from gphotos_reconcile.reconciler.retry_queue import (
    RetryVerdict,
    WriteChunk,
    default_identity,
    plan_retry,
)

PATHS = ("/p/a.jpg", "/p/b.jpg", "/p/c.jpg", "/p/Album - 2022/d.jpg")


def chunk_of(members=PATHS, **kwargs):
    return WriteChunk(chunk_id=7, members=tuple(members), **kwargs)


class TestPlanRetry:
    """Tests for plan_retry verdicts."""

    def test_no_fingerprints_no_text_is_success(self):
        decision = plan_retry(chunk_of(), set(), "")

        assert decision.verdict is RetryVerdict.SUCCEEDED
        assert decision.pending is None
        assert decision.written == PATHS

    def test_no_fingerprints_with_text_is_undetermined(self):
        sink = RecordingEventSink()

        decision = plan_retry(chunk_of(), set(), "Error: something broke", sink=sink)

        assert decision.verdict is RetryVerdict.UNDETERMINED
        assert decision.pending is None
        assert decision.unresolved == PATHS
        assert decision.written == ()
        event = sink.of("diagnostics_unparseable")[0]
        assert event.level == logging.WARNING
        assert event.fields["chunk_id"] == 7

    def test_retry_only_failed_subset(self):
        fingerprints = {canonicalize("/P/B.JPG"), canonicalize("/p/Album - 2022/d.jpg")}

        decision = plan_retry(chunk_of(), fingerprints, "Error: ...")

        assert decision.verdict is RetryVerdict.RETRY
        assert decision.pending.members == ("/p/b.jpg", "/p/Album - 2022/d.jpg")
        assert decision.pending.round == 1
        assert decision.pending.chunk_id == 7
        assert decision.pending.retried == fingerprints
        assert decision.written == ("/p/a.jpg", "/p/c.jpg")
        assert decision.failed == ()

    def test_mismatch_is_terminal(self):
        sink = RecordingEventSink()

        decision = plan_retry(chunk_of(), {canonicalize("/elsewhere/x.jpg")}, "Error: x - /elsewhere/x.jpg", sink=sink)

        assert decision.verdict is RetryVerdict.DIAGNOSTIC_MISMATCH
        assert decision.pending is None
        assert decision.failed == PATHS
        assert sink.names() == ["diagnostic_mismatch"]

    def test_second_failure_is_exhausted(self):
        first = plan_retry(chunk_of(), {canonicalize("/p/a.jpg")}, "Error: x - /p/a.jpg")

        second = plan_retry(first.pending, {canonicalize("/p/a.jpg")}, "Error: x - /p/a.jpg")

        assert second.verdict is RetryVerdict.EXHAUSTED
        assert second.pending is None
        assert second.failed == ("/p/a.jpg",)

    def test_partial_exhaustion_keeps_fresh_members(self):
        chunk = chunk_of(retried=frozenset({canonicalize("/p/a.jpg")}))
        sink = RecordingEventSink()

        decision = plan_retry(
            chunk, {canonicalize("/p/a.jpg"), canonicalize("/p/c.jpg")}, "Error: ...", sink=sink
        )

        assert decision.verdict is RetryVerdict.RETRY
        assert decision.pending.members == ("/p/c.jpg",)
        assert decision.failed == ("/p/a.jpg",)
        assert "retry_exhausted" in sink.names()

    def test_pending_never_grows_and_terminates(self):
        """Diagnostics that keep naming the whole chunk still end the loop."""
        all_fingerprints = {canonicalize(p) for p in PATHS}
        chunk = chunk_of()
        rounds = 0

        while chunk is not None:
            decision = plan_retry(chunk, all_fingerprints, "Error: ...")
            if decision.pending is not None:
                assert len(decision.pending) <= len(chunk)
            chunk = decision.pending
            rounds += 1
            assert rounds <= len(PATHS) + 1

        assert rounds == 2
        assert decision.verdict is RetryVerdict.EXHAUSTED
        assert set(decision.failed) == set(PATHS)

    def test_file_entry_members(self):
        entries = [FileEntry("/p/a.jpg"), FileEntry("/p/O\u0308l.jpg")]

        decision = plan_retry(
            chunk_of(entries), {canonicalize("/p/\u00d6l.jpg")}, "Error: x - /p/\u00d6l.jpg"
        )

        assert decision.verdict is RetryVerdict.RETRY
        assert decision.pending.members == (entries[1],)
        assert decision.written == (entries[0],)

    def test_custom_identity_function(self):
        members = [{"file": "/p/a.jpg"}, {"file": "/p/b.jpg"}]

        decision = plan_retry(
            chunk_of(members), {canonicalize("/p/b.jpg")}, "Error: ...",
            identity_of=lambda m: canonicalize(m["file"]),
        )

        assert decision.pending.members == (members[1],)


def test_default_identity():
    entry = FileEntry("/p/A.jpg")
    assert default_identity(entry) is entry.identity
    assert default_identity("/P/a.JPG") == entry.identity

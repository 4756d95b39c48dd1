"""Filename and write-failure reconciliation for Google Takeout media."""

from .batch_writer import BatchWriter, BatchWriteReport, WriteAttempt, make_chunks
from .config import ReconcilerAppConfig, ReconcilerConfig
from .diagnostics import extract_failed_paths
from .events import EventSink, LoggingEventSink, RecordingEventSink, ReconcileEvent
from .exiftool import ExifToolWriter, build_exiftool_batch_writer, find_exiftool, require_exiftool
from .fixer import FixStatus, TruncatedFilenameFixer, fix_truncated_filenames
from .models import FileEntry, MediaRecord
from .rename_transaction import RenameResult, RenameStatus, RenameTransaction, apply_paired_rename
from .retry_queue import RetryDecision, RetryVerdict, WriteChunk, plan_retry
from .sidecar_matcher import find_sidecar, sidecar_target_path
from .summary import TruncationFixSummary, format_summary_human_readable
from .truncation import ResolveResult, ResolveStatus, resolve

__all__ = [
    'BatchWriter',
    'BatchWriteReport',
    'WriteAttempt',
    'make_chunks',
    'ReconcilerAppConfig',
    'ReconcilerConfig',
    'extract_failed_paths',
    'ExifToolWriter',
    'build_exiftool_batch_writer',
    'find_exiftool',
    'require_exiftool',
    'EventSink',
    'LoggingEventSink',
    'RecordingEventSink',
    'ReconcileEvent',
    'FixStatus',
    'TruncatedFilenameFixer',
    'fix_truncated_filenames',
    'FileEntry',
    'MediaRecord',
    'RenameResult',
    'RenameStatus',
    'RenameTransaction',
    'apply_paired_rename',
    'RetryDecision',
    'RetryVerdict',
    'WriteChunk',
    'plan_retry',
    'find_sidecar',
    'sidecar_target_path',
    'TruncationFixSummary',
    'format_summary_human_readable',
    'ResolveResult',
    'ResolveStatus',
    'resolve',
]

"""CLI commands for reconciliation."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from gphotos_reconcile.common import ConfigLoader, setup_logging

from .config import ReconcilerAppConfig
from .diagnostics import extract_failed_paths
from .discovery import discover_media_files
from .fixer import TruncatedFilenameFixer, records_from_paths
from .summary import format_summary_human_readable

APP_NAME = "gphotos-reconcile"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_RENAME_FAILURES = 2


def fix_truncated_command(
    config: ReconcilerAppConfig,
    target_media_path_override: Optional[Path] = None,
    tryhard_override: Optional[bool] = None,
    out: Optional[TextIO] = None,
) -> int:
    """Restore truncated filenames under a media folder.

    Args:
        config: Configuration object
        target_media_path_override: Optional override for the media folder
        tryhard_override: Optional override for tryhard sidecar lookup
        out: Stream for the summary report

    Returns:
        Exit code (0 success, 1 could not start, 2 some renames failed)
    """
    logger = logging.getLogger(__package__ or __name__)

    out = out or sys.stdout
    if target_media_path_override is None and not config.reconciler.target_media_path:
        logger.error("No target media path given (--target-media-path or reconciler.target_media_path)")
        return EXIT_ERROR
    target_media_path = target_media_path_override or Path(config.reconciler.target_media_path)
    tryhard = tryhard_override if tryhard_override is not None else config.reconciler.tryhard

    if not target_media_path.is_dir():
        logger.error(f"Target media directory does not exist: {{'path': {str(target_media_path)!r}}}")
        return EXIT_ERROR

    logger.info(f"Configuration: {{'target_media_path': {str(target_media_path)!r}, 'tryhard': {tryhard}}}")

    records = records_from_paths(discover_media_files(target_media_path))
    fixer = TruncatedFilenameFixer(
        tryhard=tryhard,
        progress_log_interval=config.reconciler.progress_log_interval,
    )
    summary = fixer.fix(records)

    print(format_summary_human_readable(summary), file=out)
    return EXIT_RENAME_FAILURES if summary.rename_failed else EXIT_OK


def extract_failures_command(
    config: ReconcilerAppConfig,
    source: str,
    out: Optional[TextIO] = None,
) -> int:
    """Print the files named as failed in a diagnostics file ("-" for stdin).

    Returns:
        Exit code (0 success, 1 unreadable input)
    """
    logger = logging.getLogger(__package__ or __name__)
    out = out or sys.stdout

    try:
        if source == "-":
            text = sys.stdin.read()
        else:
            text = Path(source).read_text(encoding='utf-8', errors='replace')
    except OSError as e:
        logger.error(f"Cannot read diagnostics: {{'path': {source!r}, 'error': {str(e)!r}}}")
        return EXIT_ERROR

    failed = extract_failed_paths(
        text,
        markers=config.reconciler.failure_markers,
        separator=config.reconciler.diagnostic_separator,
        trailing=config.reconciler.diagnostic_trailing,
    )
    for identity in sorted(failed, key=lambda i: i.key):
        print(identity.path, file=out)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Reconcile Google Takeout media files with their JSON sidecars"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    fix_parser = subparsers.add_parser(
        "fix-truncated",
        help="Restore truncated media filenames from sidecar titles"
    )
    fix_parser.add_argument(
        "--target-media-path",
        type=Path,
        required=False,
        help="Directory containing extracted media files (overrides config)"
    )
    fix_parser.add_argument(
        "--no-tryhard",
        action="store_true",
        help="Only look for <name>.json and <name>.supplemental-metadata.json sidecars"
    )

    extract_parser = subparsers.add_parser(
        "extract-failures",
        help="List files reported as failed in write-tool diagnostics"
    )
    extract_parser.add_argument(
        "diagnostics",
        help="Diagnostics file, or - for stdin"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    loader = ConfigLoader(app_name=APP_NAME, config_class=ReconcilerAppConfig)
    config = loader.load(defaults_path=args.config)

    setup_logging(
        level=config.logging.level,
        format=config.logging.format,
        log_file=config.logging.file_path,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
    )

    if args.command == "fix-truncated":
        return fix_truncated_command(
            config=config,
            target_media_path_override=args.target_media_path,
            tryhard_override=False if args.no_tryhard else None,
        )
    return extract_failures_command(config=config, source=args.diagnostics)


if __name__ == "__main__":
    sys.exit(main())

"""Media file discovery for the CLI."""

import logging
from pathlib import Path
from typing import List

from .sidecar_matcher import JSON_SUFFIX

logger = logging.getLogger(__name__)

# System files to exclude (cross-platform)
SYSTEM_FILES = {
    'thumbs.db',      # Windows thumbnail cache
    'desktop.ini',    # Windows folder settings
    '.ds_store',      # macOS folder metadata
    'icon\r',         # macOS custom folder icon (has literal carriage return!)
}

# Google Photos export files that are neither media nor sidecars
GOOGLE_PHOTOS_EXTRA_FILES = {
    'archive_browser.html',
}

# Temporary file extensions to exclude
TEMP_EXTENSIONS = {'.tmp', '.temp', '.cache', '.bak', '.swp'}


def is_media_candidate(path: Path) -> bool:
    """
    Decide whether a file may be a media file worth reconciling.

    Excludes JSON (sidecars and album metadata), system files and temporary
    files. Hidden files are kept: Takeout contains valid media such as
    ".facebook_865716343.jpg".

    Args:
        path: Path to check

    Returns:
        True if the file should be checked
    """
    filename = path.name.lower()

    if filename.endswith(JSON_SUFFIX):
        return False
    if filename in SYSTEM_FILES or filename in GOOGLE_PHOTOS_EXTRA_FILES:
        return False
    if path.suffix.lower() in TEMP_EXTENSIONS:
        return False
    return True


def discover_media_files(target_media_path: Path) -> List[Path]:
    """List candidate media files under a Takeout folder, sorted.

    Uses "Takeout/Google Photos" when present, else the folder itself.
    """
    google_photos_path = target_media_path / "Takeout" / "Google Photos"
    scan_root = google_photos_path if google_photos_path.exists() else target_media_path

    files = sorted(p for p in scan_root.rglob("*") if p.is_file() and is_media_candidate(p))
    logger.info(f"Files collected: {{'root': {str(scan_root)!r}, 'media': {len(files)}}}")
    return files

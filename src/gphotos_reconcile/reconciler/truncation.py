"""Truncated filename detection against the sidecar ``title`` field.

Google Takeout truncates long filenames (about 47 characters of base name so
the ".json" sidecar stays under the 51-character limit). The sidecar keeps the
original name in ``title``. A file is only considered truncated when its stem
is a strict, case-insensitive prefix of the title stem: renaming is
destructive, so merely similar names never qualify.
"""

import enum
import json
import logging
import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from gphotos_reconcile.common import ParseError

from .filesystem import Filesystem, LOCAL_FILESYSTEM

logger = logging.getLogger(__name__)

# ".HEIC.jpg" style: original suffix followed by a corrected one
DOUBLE_EXTENSION_RE = re.compile(r'\.([a-zA-Z0-9]{2,5})\.([a-zA-Z0-9]{2,5})$')
TITLE_EXTENSION_RE = re.compile(r'\.[a-zA-Z0-9]{2,5}$')
ILLEGAL_FILENAME_CHARS_RE = re.compile(r'[<>:"/\\|?*]')
CONTROL_CHARS_RE = re.compile(r'[\x00-\x1f]')


class ResolveStatus(enum.Enum):
    NO_TITLE = "no_title"
    NOT_TRUNCATED = "not_truncated"
    TRUNCATED = "truncated"


@dataclass(frozen=True)
class ResolveResult:
    """Outcome of comparing a media filename with its sidecar title.

    Attributes:
        status: ResolveStatus
        corrected_stem: Sanitized full stem (TRUNCATED only)
        extension: Current extension kept on rename, possibly double (".HEIC.jpg")
    """
    status: ResolveStatus
    corrected_stem: Optional[str] = None
    extension: str = ""

    @property
    def corrected_name(self) -> Optional[str]:
        """New basename, or None unless truncated."""
        if self.corrected_stem is None:
            return None
        return f"{self.corrected_stem}{self.extension}"


def load_sidecar(sidecar_path: Path, filesystem: Filesystem = LOCAL_FILESYSTEM) -> dict:
    """Read a sidecar JSON object.

    Raises:
        ParseError: If the file is unreadable, not JSON or not a JSON object
    """
    try:
        data = json.loads(filesystem.read_text(sidecar_path))
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"Cannot read sidecar: {e}", file_path=str(sidecar_path)) from e
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in sidecar: {e}", file_path=str(sidecar_path)) from e

    if not isinstance(data, dict):
        raise ParseError(
            f"Sidecar top level is {type(data).__name__}, expected object",
            file_path=str(sidecar_path),
        )
    return data


def read_sidecar_title(sidecar_path: Path, filesystem: Filesystem = LOCAL_FILESYSTEM) -> Optional[str]:
    """Return the non-empty ``title`` of a sidecar, or None.

    Never raises: unreadable or malformed sidecars count as having no title.
    """
    try:
        data = load_sidecar(sidecar_path, filesystem)
    except ParseError as e:
        logger.debug(f"Sidecar has no usable title: {{'path': {str(sidecar_path)!r}, 'error': {e.message!r}}}")
        return None

    title = data.get('title')
    if not isinstance(title, str) or not title:
        return None
    return unicodedata.normalize('NFC', title)


def split_stem_and_extension(filename: str) -> tuple[str, str]:
    """Split a basename into stem and extension, keeping double extensions whole.

    >>> split_stem_and_extension("IMG_1234.HEIC.jpg")
    ('IMG_1234', '.HEIC.jpg')
    >>> split_stem_and_extension("IMG_1234.jpg")
    ('IMG_1234', '.jpg')
    """
    match = DOUBLE_EXTENSION_RE.search(filename)
    if match:
        return filename[:match.start()], filename[match.start():]

    path = Path(filename)
    return path.stem, path.suffix


def title_stem(title: str) -> str:
    """Strip one trailing extension-like suffix from a title."""
    match = TITLE_EXTENSION_RE.search(title)
    if match:
        return title[:match.start()]
    return title


def normalize_for_comparison(value: str) -> str:
    return unicodedata.normalize('NFC', value).casefold().strip()


def is_truncation_of(truncated: str, full: str) -> bool:
    """True when ``truncated`` is a strictly shorter, case-insensitive prefix of ``full``."""
    truncated = normalize_for_comparison(truncated)
    full = normalize_for_comparison(full)
    if len(truncated) >= len(full):
        return False
    return full.startswith(truncated)


def sanitize_filename(name: str) -> str:
    """Replace characters illegal on Windows/macOS/Linux and drop control characters."""
    name = ILLEGAL_FILENAME_CHARS_RE.sub('_', name)
    name = CONTROL_CHARS_RE.sub('', name)
    return name.strip()


def resolve(
    media_path: Path | str,
    sidecar_path: Path | str,
    filesystem: Filesystem = LOCAL_FILESYSTEM,
) -> ResolveResult:
    """Decide whether a media filename is a truncated form of its sidecar title.

    Args:
        media_path: Current media file path
        sidecar_path: Path to the JSON sidecar
        filesystem: Filesystem primitives

    Returns:
        ResolveResult; TRUNCATED carries the sanitized stem and the current
        extension (which an earlier extension-fixing stage may have corrected)
    """
    title = read_sidecar_title(Path(sidecar_path), filesystem)
    if title is None:
        return ResolveResult(ResolveStatus.NO_TITLE)

    current_stem, extension = split_stem_and_extension(Path(media_path).name)
    expected_stem = title_stem(title)

    if normalize_for_comparison(current_stem) == normalize_for_comparison(expected_stem):
        return ResolveResult(ResolveStatus.NOT_TRUNCATED, extension=extension)

    if not is_truncation_of(current_stem, expected_stem):
        return ResolveResult(ResolveStatus.NOT_TRUNCATED, extension=extension)

    corrected = sanitize_filename(expected_stem)
    if not corrected:
        return ResolveResult(ResolveStatus.NOT_TRUNCATED, extension=extension)

    return ResolveResult(ResolveStatus.TRUNCATED, corrected_stem=corrected, extension=extension)

"""Path utilities for consistent path identity across packages."""

import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class FileIdentity:
    """Comparison-stable identity of a filesystem path.

    Attributes:
        path: NFC-normalized path with original case and separators (storage form)
        key: NFC-normalized, lower-cased path with forward slashes (matching form)

    Equality and hashing use ``key`` only, so two spellings of the same file
    (NFD vs NFC, ``C:\\A`` vs ``c:/a``) collapse to one identity in sets and dicts.
    ``key`` is never meant for display.
    """
    path: str = field(compare=False)
    key: str

    def __str__(self) -> str:
        return self.path


PathLike = Union[str, Path, FileIdentity]


def normalize_path(path: Path | str) -> str:
    """
    Normalize a path for consistent storage and comparison across all packages.

    Applies:
    - Unicode NFC normalization (canonical composition) for consistent Unicode handling
    - Forward slash conversion for cross-platform consistency

    Args:
        path: Path object or string to normalize

    Returns:
        Normalized path string with forward slashes and NFC Unicode normalization

    Examples:
        >>> normalize_path(Path("café/résumé.txt"))
        'café/résumé.txt'
        >>> normalize_path(r"C:\\Users\\test\\photos")
        'C:/Users/test/photos'
    """
    normalized = unicodedata.normalize('NFC', str(path))
    return normalized.replace('\\', '/')


def nfc(path: PathLike) -> str:
    """Return the path as an NFC string, keeping case and separators."""
    if isinstance(path, FileIdentity):
        return path.path
    return unicodedata.normalize('NFC', str(path))


def comparison_key(path: PathLike) -> str:
    """
    Derive the case- and separator-insensitive matching key of a path.

    The whole string is normalized, not just the basename: macOS stores every
    directory segment decomposed (NFD), so an album folder named "Öjendorf"
    differs byte-wise between an export read on macOS and one read on Linux.

    Args:
        path: Path, string or FileIdentity

    Returns:
        NFC, lower-cased path with forward slashes
    """
    if isinstance(path, FileIdentity):
        return path.key
    lowered = normalize_path(path).lower()
    # lower() can emit combining marks (e.g. U+0130), so compose again
    return unicodedata.normalize('NFC', lowered)


def canonicalize(path: PathLike) -> FileIdentity:
    """
    Canonicalize any path input into a FileIdentity.

    Total and idempotent: ``canonicalize(canonicalize(p)) == canonicalize(p)``.

    Args:
        path: Path, string or FileIdentity

    Returns:
        FileIdentity holding the NFC storage path and the matching key

    Examples:
        >>> canonicalize("/Fotos/o\\u0308l.jpg") == canonicalize("/fotos/öl.JPG")
        True
    """
    if isinstance(path, FileIdentity):
        return path
    stored = nfc(path)
    return FileIdentity(path=stored, key=comparison_key(stored))

"""Media record models.

Every path-bearing field is NFC-normalized on assignment. macOS (HFS+/APFS)
hands out decomposed names, so "ö" read from a directory listing there is
"o" + U+0308; without normalization the same file looks like two files and
lookups fail with FileNotFoundError on other platforms.
"""

from pathlib import Path
from typing import Iterator, List, Optional

from gphotos_reconcile.common import FileIdentity, canonicalize, nfc


class FileEntry:
    """One file of a media record (the primary file or a duplicate)."""

    def __init__(self, source_path: Path | str, target_path: Optional[Path | str] = None) -> None:
        self.source_path = source_path
        self.target_path = target_path

    @property
    def source_path(self) -> str:
        return self._source_path

    @source_path.setter
    def source_path(self, value: Path | str) -> None:
        self._source_path = nfc(value)
        self._source_identity = canonicalize(self._source_path)

    @property
    def target_path(self) -> Optional[str]:
        return self._target_path

    @target_path.setter
    def target_path(self, value: Optional[Path | str]) -> None:
        self._target_path = nfc(value) if value is not None else None

    @property
    def path(self) -> str:
        """Effective path: target when set, otherwise source."""
        return self._target_path if self._target_path is not None else self._source_path

    @property
    def identity(self) -> FileIdentity:
        """Identity of the current source path."""
        return self._source_identity

    def as_path(self) -> Path:
        return Path(self._source_path)

    def __repr__(self) -> str:
        return f"FileEntry(source_path={self._source_path!r}, target_path={self._target_path!r})"


class MediaRecord:
    """One logical media item with a primary file and optional secondaries.

    Owned by the caller's collection; the reconciler only mutates path fields.
    """

    def __init__(self, primary: FileEntry | Path | str, secondaries: Optional[List[FileEntry | Path | str]] = None) -> None:
        self.primary = primary if isinstance(primary, FileEntry) else FileEntry(primary)
        self.secondaries: List[FileEntry] = [
            s if isinstance(s, FileEntry) else FileEntry(s) for s in (secondaries or [])
        ]

    def entries(self) -> Iterator[FileEntry]:
        """Primary first, then secondaries in order."""
        yield self.primary
        yield from self.secondaries

    def __repr__(self) -> str:
        return f"MediaRecord(primary={self.primary!r}, secondaries={len(self.secondaries)})"

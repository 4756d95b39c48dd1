"""Filesystem primitives consumed by the reconciler.

The core needs four operations: existence check, single-file rename,
read-as-text and directory listing. Routing them through one object lets
tests inject failures at a precise step.
"""

import os
from pathlib import Path
from typing import List


class Filesystem:
    """Local filesystem access."""

    def exists(self, path: Path) -> bool:
        # lexists so a dangling symlink still blocks an overwrite
        return os.path.lexists(path)

    def rename(self, source: Path, target: Path) -> None:
        """Rename a single file.

        Raises:
            FileExistsError: If target already exists (never overwrites)
            OSError: If the rename fails
        """
        if os.path.lexists(target):
            raise FileExistsError(f"Rename target already exists: {target}")
        os.rename(source, target)

    def read_text(self, path: Path) -> str:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def listdir(self, directory: Path) -> List[Path]:
        """Entries of a directory, sorted by name."""
        return sorted(directory.iterdir())


LOCAL_FILESYSTEM = Filesystem()

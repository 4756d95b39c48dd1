"""JSON sidecar lookup for media files.

Google Takeout writes one JSON sidecar next to each media file. Two naming
patterns are current:

    IMG_1234.jpg.json
    IMG_1234.jpg.supplemental-metadata.json

Older and larger exports also produce variants (tryhard mode):

    shortened:        <first 46 chars of name>.json      (51-char name limit)
    numbered:         IMG_1234(1).jpg -> IMG_1234.jpg(1).json
    edited:           IMG_1234-edited.jpg -> IMG_1234.jpg.json
    no extension:     IMG_1234.json
    truncated tail:   IMG_1234.jpg.supplemental-met.json
"""

import logging
import re
import unicodedata
from pathlib import Path
from typing import Iterator, Optional

from .filesystem import Filesystem, LOCAL_FILESYSTEM

logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"
SUPPLEMENTAL_TAIL = ".supplemental-metadata"
SUPPLEMENTAL_SUFFIX = SUPPLEMENTAL_TAIL + JSON_SUFFIX

# Google caps sidecar filenames at 51 characters
MAX_SIDECAR_NAME_LENGTH = 51

# Localized suffixes Google Photos appends to edited copies
EDITED_SUFFIXES = (
    "-edited",
    "-effects",
    "-bearbeitet",
    "-bewerkt",
    "-modifié",
    "-modificato",
    "-editado",
    "-edytowane",
    "-編集済み",
)

NUMBERED_RE = re.compile(r'^(?P<stem>.*?)(?P<num>\(\d+\))(?P<ext>\.[^.]+)$')


def sidecar_candidates(media_path: Path, tryhard: bool = False) -> Iterator[Path]:
    """Yield candidate sidecar paths for a media file in lookup order.

    Candidates may repeat; callers stop at the first existing one.

    Args:
        media_path: Path to the media file
        tryhard: Also yield the historical Google Takeout variants

    Yields:
        Candidate sidecar paths in the media file's directory
    """
    directory = media_path.parent
    name = media_path.name

    yield directory / f"{name}{JSON_SUFFIX}"
    yield directory / f"{name}{SUPPLEMENTAL_SUFFIX}"

    if not tryhard:
        return

    max_base = MAX_SIDECAR_NAME_LENGTH - len(JSON_SUFFIX)
    if len(name) > max_base:
        yield directory / f"{name[:max_base]}{JSON_SUFFIX}"

    numbered = NUMBERED_RE.match(name)
    if numbered:
        base = f"{numbered.group('stem')}{numbered.group('ext')}"
        num = numbered.group('num')
        yield directory / f"{base}{num}{JSON_SUFFIX}"
        yield directory / f"{base}{SUPPLEMENTAL_TAIL}{num}{JSON_SUFFIX}"

    stem, suffix = unicodedata.normalize('NFC', media_path.stem), media_path.suffix
    for edited in EDITED_SUFFIXES:
        if stem.lower().endswith(edited):
            original = f"{stem[:-len(edited)]}{suffix}"
            yield directory / f"{original}{JSON_SUFFIX}"
            yield directory / f"{original}{SUPPLEMENTAL_SUFFIX}"
            break

    if suffix:
        yield directory / f"{stem}{JSON_SUFFIX}"
        yield directory / f"{stem}{SUPPLEMENTAL_SUFFIX}"


def find_sidecar(
    media_path: Path | str,
    tryhard: bool = False,
    filesystem: Filesystem = LOCAL_FILESYSTEM,
) -> Optional[Path]:
    """Locate the JSON sidecar of a media file.

    Args:
        media_path: Path to the media file
        tryhard: Enable the historical naming variants, including a directory
            scan for sidecars whose ".supplemental-metadata" tail was cut short
        filesystem: Filesystem primitives

    Returns:
        Path to the first existing sidecar, or None
    """
    media_path = Path(media_path)

    for candidate in sidecar_candidates(media_path, tryhard=tryhard):
        if candidate != media_path and filesystem.exists(candidate):
            logger.debug(f"Sidecar found: {{'media': {media_path.name!r}, 'sidecar': {candidate.name!r}}}")
            return candidate

    if tryhard:
        match = _find_truncated_supplemental(media_path, filesystem)
        if match:
            logger.debug(f"Sidecar found (truncated tail): {{'media': {media_path.name!r}, 'sidecar': {match.name!r}}}")
            return match

    return None


def _find_truncated_supplemental(media_path: Path, filesystem: Filesystem) -> Optional[Path]:
    """Scan the directory for "<name>.<prefix of supplemental-metadata>.json"."""
    prefix = unicodedata.normalize('NFC', media_path.name) + "."
    tail = SUPPLEMENTAL_TAIL[1:]

    try:
        entries = filesystem.listdir(media_path.parent)
    except OSError as e:
        logger.debug(f"Cannot list directory: {{'path': {str(media_path.parent)!r}, 'error': {str(e)!r}}}")
        return None

    for entry in entries:
        entry_name = unicodedata.normalize('NFC', entry.name)
        if not entry_name.startswith(prefix) or not entry_name.lower().endswith(JSON_SUFFIX):
            continue
        middle = entry_name[len(prefix):-len(JSON_SUFFIX)].lower()
        if middle and tail.startswith(middle):
            return entry

    return None


def is_supplemental_sidecar(sidecar_path: Path | str) -> bool:
    """True when the sidecar uses the ".supplemental-metadata" naming pattern."""
    return SUPPLEMENTAL_TAIL in Path(sidecar_path).name.lower()


def sidecar_target_path(sidecar_path: Path | str, new_media_name: str) -> Path:
    """Compute the sidecar path that matches a renamed media file.

    Keeps the naming pattern the existing sidecar uses.

    Args:
        sidecar_path: Current sidecar path
        new_media_name: New media basename including extension

    Returns:
        "<new_media_name>.supplemental-metadata.json" or "<new_media_name>.json"
        in the sidecar's directory
    """
    sidecar_path = Path(sidecar_path)
    if is_supplemental_sidecar(sidecar_path):
        return sidecar_path.parent / f"{new_media_name}{SUPPLEMENTAL_SUFFIX}"
    return sidecar_path.parent / f"{new_media_name}{JSON_SUFFIX}"

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from .config import DEFAULT_EXTENSIONS, normalize_extensions
from .errors import EmptySource, InvalidConfig, SourceUnreadable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileEntry:
    """One candidate image: its path and the size recorded at enumeration."""

    id: Path
    size_bytes: int

    @property
    def name(self) -> str:
        return self.id.name


def _matches(path: Path, extensions: Iterable[str]) -> bool:
    suffix = path.suffix.lower().lstrip(".")
    return bool(suffix) and suffix in extensions


def build_inventory(
    source: str | Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> List[FileEntry]:
    """List matching regular files directly inside ``source`` with their sizes.

    Subdirectories are not traversed. A file whose size cannot be read makes
    the whole inventory fail rather than being skipped.
    """

    root = Path(source)
    accepted = normalize_extensions(extensions)
    if not accepted:
        raise InvalidConfig("extensions", tuple(extensions), "at least one extension is required")
    if not root.is_dir():
        raise SourceUnreadable(root, "not a directory")
    try:
        children = sorted(root.iterdir())
    except OSError as exc:
        raise SourceUnreadable(root, str(exc)) from exc

    entries: List[FileEntry] = []
    for path in children:
        if not _matches(path, accepted):
            logger.debug("Skipping %s (extension not accepted)", path.name)
            continue
        try:
            info = path.stat()
        except OSError as exc:
            # A dangling or looping symlink is not a file.
            if os.path.islink(path):
                logger.debug("Skipping %s (broken symlink)", path.name)
                continue
            raise SourceUnreadable(path, f"cannot stat file: {exc}") from exc
        if not stat.S_ISREG(info.st_mode):
            logger.debug("Skipping %s (not a regular file)", path.name)
            continue
        try:
            path.name.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise SourceUnreadable(path, "non-utf8 filename not supported") from exc
        entries.append(FileEntry(id=path, size_bytes=info.st_size))

    if not entries:
        raise EmptySource(root, accepted)
    logger.info(
        "Found %d image(s) totalling %d bytes in %s",
        len(entries),
        sum(entry.size_bytes for entry in entries),
        root,
    )
    return entries

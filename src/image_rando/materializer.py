from __future__ import annotations

import logging
import shutil
from pathlib import Path

from tqdm import tqdm

from .distributor import Bin, DistributionPlan
from .errors import CopyFailed, DestinationNotEmpty

logger = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 1024 * 1024


def prepare_destination(dest_dir: Path) -> None:
    """Create ``dest_dir`` if needed and require that it holds nothing yet."""
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CopyFailed(None, dest_dir, f"cannot create destination folder: {exc}") from exc
    if not dest_dir.is_dir():
        raise CopyFailed(None, dest_dir, "destination is not a directory")
    try:
        has_children = any(True for _ in dest_dir.iterdir())
    except OSError as exc:
        raise CopyFailed(None, dest_dir, f"cannot read destination folder: {exc}") from exc
    if has_children:
        raise DestinationNotEmpty(dest_dir)


def bin_folder(dest_dir: Path, item: Bin) -> Path:
    return dest_dir / str(item.index)


def copy_file(source: Path, destination: Path) -> int:
    """Copy one file without ever overwriting an existing destination."""
    try:
        with source.open("rb") as reader, destination.open("xb") as writer:
            shutil.copyfileobj(reader, writer, COPY_BUFFER_SIZE)
    except FileExistsError as exc:
        raise CopyFailed(source, destination, "unexpected destination file already exists") from exc
    except OSError as exc:
        raise CopyFailed(source, destination, str(exc)) from exc
    return destination.stat().st_size


def materialize(plan: DistributionPlan, dest_dir: Path, *, progress: bool = True) -> int:
    """Create ``dest_dir/1 .. dest_dir/N`` and copy each bin's files into them.

    Returns the number of bytes written.
    """

    copied_bytes = 0
    bar = tqdm(total=plan.total_files, desc="copy", unit="file", disable=not progress)
    try:
        for item in plan:
            folder = bin_folder(dest_dir, item)
            try:
                folder.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise CopyFailed(None, folder, f"cannot create folder: {exc}") from exc
            logger.debug("Copying %d file(s) into %s", len(item.entries), folder)
            for entry in item.entries:
                copied_bytes += copy_file(entry.id, folder / entry.name)
                bar.update(1)
    finally:
        bar.close()
    return copied_bytes

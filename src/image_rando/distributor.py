"""Randomised split of an image inventory into numbered folders.

Nothing here touches the filesystem: the result is a :class:`DistributionPlan`
that :mod:`image_rando.materializer` turns into directories and copies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .config import DEFAULT_MAX_BYTES, DEFAULT_MAX_COUNT, validate_limits, validate_seed
from .errors import InvalidConfig
from .inventory import FileEntry
from .rng import XorShift64, generate_seed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bin:
    """Planned contents of one numbered destination folder."""

    index: int
    entries: Tuple[FileEntry, ...]
    total_bytes: int
    # Single file larger than the byte cap.
    oversized: bool = False

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class DistributionPlan:
    bins: Tuple[Bin, ...]
    seed: int
    max_count: int
    max_bytes: int

    def __iter__(self) -> Iterator[Bin]:
        return iter(self.bins)

    def __len__(self) -> int:
        return len(self.bins)

    @property
    def total_files(self) -> int:
        return sum(len(item.entries) for item in self.bins)

    @property
    def total_bytes(self) -> int:
        return sum(item.total_bytes for item in self.bins)

    def as_tuples(self) -> List[Tuple[int, Tuple[FileEntry, ...], int]]:
        return [(item.index, item.entries, item.total_bytes) for item in self.bins]


def _validate_entries(entries: Sequence[FileEntry]) -> None:
    seen = set()
    for entry in entries:
        if entry.size_bytes < 0:
            raise InvalidConfig("entries", entry.id, f"negative size_bytes {entry.size_bytes}")
        if entry.id in seen:
            raise InvalidConfig("entries", entry.id, "duplicate entry id")
        seen.add(entry.id)


def shuffle_entries(entries: Sequence[FileEntry], rng: XorShift64) -> List[FileEntry]:
    """Return a Fisher-Yates permutation of ``entries`` drawn from ``rng``."""
    shuffled = list(entries)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.below(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def pack_entries(entries: Iterable[FileEntry], max_count: int, max_bytes: int) -> List[Bin]:
    """Greedily split ``entries`` in order into bins honouring both caps.

    A file larger than ``max_bytes`` becomes a bin of its own at the point it
    is met; the bin being filled stays open and continues with the next file.
    """

    validate_limits(max_count, max_bytes)
    bins: List[Bin] = []
    current: List[FileEntry] = []
    current_bytes = 0

    def close(members: List[FileEntry], total: int, oversized: bool = False) -> None:
        item = Bin(index=len(bins) + 1, entries=tuple(members), total_bytes=total, oversized=oversized)
        bins.append(item)
        logger.debug("Bin %d closed: %d file(s), %d bytes", item.index, len(item.entries), item.total_bytes)

    for entry in entries:
        if entry.size_bytes > max_bytes:
            logger.warning(
                "%s is larger than max-bytes (%d > %d); placing it alone in folder %d",
                entry.id,
                entry.size_bytes,
                max_bytes,
                len(bins) + 1,
            )
            close([entry], entry.size_bytes, oversized=True)
            continue
        would_exceed_count = len(current) + 1 > max_count
        would_exceed_bytes = current_bytes + entry.size_bytes > max_bytes
        if current and (would_exceed_count or would_exceed_bytes):
            close(current, current_bytes)
            current = []
            current_bytes = 0
        current.append(entry)
        current_bytes += entry.size_bytes

    if current:
        close(current, current_bytes)
    return bins


def distribute(
    entries: Iterable[FileEntry],
    seed: Optional[int] = None,
    max_count: int = DEFAULT_MAX_COUNT,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> DistributionPlan:
    """Shuffle ``entries`` with ``seed`` and pack them into numbered bins.

    When ``seed`` is ``None`` one is generated; either way it is stored on the
    returned plan so the run can be repeated. The input is sorted by path
    before shuffling, so the plan depends only on which files were given and
    not on the order they were listed in.
    """

    validate_limits(max_count, max_bytes)
    validate_seed(seed)

    canonical = sorted(entries, key=lambda entry: str(entry.id))
    _validate_entries(canonical)

    used_seed = generate_seed() if seed is None else seed
    logger.info("Shuffling %d file(s) with seed %d", len(canonical), used_seed)
    shuffled = shuffle_entries(canonical, XorShift64(used_seed))
    bins = pack_entries(shuffled, max_count, max_bytes)
    return DistributionPlan(bins=tuple(bins), seed=used_seed, max_count=max_count, max_bytes=max_bytes)

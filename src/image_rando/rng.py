"""Seeded random source used for shuffling.

xorshift64 is used instead of :mod:`random` so a given seed yields the same
folder layout regardless of Python version or platform.
"""

from __future__ import annotations

import os
import time

_MASK64 = (1 << 64) - 1
_ZERO_SEED_REPLACEMENT = 0xA5A5_A5A5_5A5A_5A5A
_GOLDEN_GAMMA = 0x9E37_79B9_7F4A_7C15


class XorShift64:
    def __init__(self, seed: int) -> None:
        seed &= _MASK64
        # xorshift never leaves the all-zero state.
        self.state = seed if seed != 0 else _ZERO_SEED_REPLACEMENT

    def next_u64(self) -> int:
        x = self.state
        x ^= (x << 13) & _MASK64
        x ^= x >> 7
        x ^= (x << 17) & _MASK64
        self.state = x
        return x

    def below(self, bound: int) -> int:
        """Return an index in ``[0, bound)``."""
        if bound < 1:
            raise ValueError("bound must be positive")
        return self.next_u64() % bound


def generate_seed() -> int:
    nanos = time.time_ns() & _MASK64
    return (nanos ^ (os.getpid() * _GOLDEN_GAMMA)) & _MASK64

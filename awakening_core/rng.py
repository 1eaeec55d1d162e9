"""Seeded random number generation shared by every engine."""

from __future__ import annotations

import random
from collections.abc import Callable
from typing import Final, Optional

UINT32_MASK: Final[int] = 0xFFFFFFFF
_INCREMENT: Final[int] = 0x6D2B79F5
_DIVISOR: Final[float] = 4294967296.0

RandomFn = Callable[[], float]


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiplication."""

    return (a * b) & UINT32_MASK


class Mulberry32:
    """Mulberry32 generator producing floats in ``[0, 1)``.

    The state is a single 32-bit word. Each call adds a fixed odd increment
    and runs the result through an xorshift-multiply permutation, so the
    sequence for a given seed is identical on every platform.
    """

    __slots__ = ("_state",)

    def __init__(self, seed: int) -> None:
        self._state = seed & UINT32_MASK

    @property
    def state(self) -> int:
        return self._state

    def next_uint32(self) -> int:
        self._state = (self._state + _INCREMENT) & UINT32_MASK
        state = self._state
        t = _imul(state ^ (state >> 15), 1 | state)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & UINT32_MASK) ^ t
        return (t ^ (t >> 14)) & UINT32_MASK

    def next(self) -> float:
        return self.next_uint32() / _DIVISOR

    __call__ = next


def make_rng(seed: Optional[int] = None) -> RandomFn:
    """Return a float generator; ``None`` yields a non-deterministic one."""

    if seed is None:
        return random.Random().random
    return Mulberry32(seed).next

"""
Deterministic random numbers for puzzle generation.

Everything that must be reproducible (grid packing, word selection, colour
assignment) draws from mulberry32 with 32-bit wrapping arithmetic, so a seed
yields the same sequence on every platform.
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")

UINT32_MASK = 0xFFFFFFFF
UINT32_SCALE = 4294967296.0
MULBERRY_INCREMENT = 0x6D2B79F5


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply (unsigned result)."""
    return (a * b) & UINT32_MASK


def _mix(state: int) -> float:
    """Mulberry32 output function for an already advanced state."""
    t = state
    t = _imul(t ^ (t >> 15), t | 1)
    t ^= (t + _imul(t ^ (t >> 7), t | 61)) & UINT32_MASK
    return ((t ^ (t >> 14)) & UINT32_MASK) / UINT32_SCALE


def mulberry32(seed: int) -> float:
    """Single draw from a fresh generator seeded with `seed`."""
    return _mix((seed + MULBERRY_INCREMENT) & UINT32_MASK)


class SeededRandom:
    """
    Mulberry32 generator producing floats in [0, 1).

    Attributes:
        seed: The seed the generator was created with
    """

    def __init__(self, seed: int):
        self.seed = seed
        self._state = seed & UINT32_MASK

    def next(self) -> float:
        """Advance the state and return a float in [0, 1)."""
        self._state = (self._state + MULBERRY_INCREMENT) & UINT32_MASK
        return _mix(self._state)

    def randint(self, n: int) -> int:
        """Return an integer in [0, n)."""
        if n <= 0:
            raise ValueError(f"Upper bound must be positive, got {n}")
        return int(self.next() * n)

    def choice(self, items: Sequence[T]) -> T:
        """Pick one element of a non-empty sequence."""
        return items[self.randint(len(items))]


def seeded_shuffle(items: Sequence[T], seed: int) -> List[T]:
    """
    Fisher-Yates shuffle returning a new list.

    Each swap draws from a one-shot generator seeded with
    `seed + remaining`, so shuffles of different lengths from the same
    base seed stay independent of each other.

    Args:
        items: Items to shuffle (left untouched)
        seed: Base seed

    Returns:
        Shuffled copy of `items`
    """
    shuffled = list(items)
    remaining = len(shuffled)

    while remaining:
        i = int(mulberry32(seed + remaining) * remaining)
        remaining -= 1
        shuffled[remaining], shuffled[i] = shuffled[i], shuffled[remaining]

    return shuffled

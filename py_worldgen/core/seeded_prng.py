"""
Seeded linear-congruential PRNG used by every generation stage.

The recurrence and modulus are fixed so that a seed always reproduces the
same world. Python's random and NumPy's random must not be used inside the
generation pipeline.
"""

from typing import Sequence, TypeVar, Union

T = TypeVar("T")

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


def _int32(n: int) -> int:
    """Wrap to a signed 32-bit integer."""
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def hash_seed(seed: str) -> int:
    """Hash a string seed with the classic 31-multiplier string hash."""
    h = 0
    for char in seed:
        h = _int32((h << 5) - h + ord(char))
    return h


class SeededRandom:
    """
    Deterministic pseudo-random stream over a 32-bit integer state.

    Each call to random() advances the state exactly once, so two streams
    built from the same seed agree for any identical call sequence.
    """

    def __init__(self, seed: Union[int, str]):
        """Initialize with an integer or string seed."""
        if isinstance(seed, str):
            seed = hash_seed(seed)
        self.seed = abs(int(seed))
        self.state = self.seed
        self.call_count = 0

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS

    __call__ = random

    def uniform(self, low: float, high: float) -> float:
        """Random float in [low, high)."""
        return low + self.random() * (high - low)

    def randint(self, low: int, high: int) -> int:
        """Random integer in [low, high], both ends inclusive."""
        return low + int(self.random() * (high - low + 1))

    def chance(self, probability: float) -> bool:
        """True with the given probability."""
        return self.random() < probability

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]

    def weighted_choice(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """Choose an element with probability proportional to its weight."""
        if not items or len(items) != len(weights):
            raise ValueError("items and weights must be non-empty and of equal length")

        total = sum(weights)
        target = self.random() * total
        for item, weight in zip(items, weights):
            target -= weight
            if target < 0:
                return item
        return items[-1]

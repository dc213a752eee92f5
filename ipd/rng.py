"""
Deterministic Random Source - Seeded Mulberry32 generator.

Every stochastic choice of a run (random strategies, action sampling,
tie-breaks) is drawn from a single instance in a fixed call order, so a
given seed always reproduces the same trajectory bit for bit.
"""

MASK_32 = 0xFFFFFFFF
GOLDEN_INCREMENT = 0x6D2B79F5
TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """Low 32 bits of a 32-bit integer product."""
    return (a * b) & MASK_32


class SeededRNG:
    """Mulberry32: a 32-bit counter passed through an avalanche mix."""

    def __init__(self, seed: int):
        self.state = int(seed) & MASK_32

    def next(self) -> float:
        """Advance the counter and return a uniform value in [0, 1)."""
        self.state = (self.state + GOLDEN_INCREMENT) & MASK_32
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK_32
        return ((t ^ (t >> 14)) & MASK_32) / TWO_POW_32

    def coin_flip(self) -> int:
        """Uniform choice between action 0 and action 1."""
        return 0 if self.next() < 0.5 else 1

    def random_action(self, p_cooperate: float) -> int:
        return 0 if self.next() < p_cooperate else 1

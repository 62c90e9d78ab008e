"""Seeded random stream for the solver.

Every random decision a solve makes comes from one ``PCG32`` instance the
``Solver`` creates in ``initialize``: the tie-break among lowest-entropy
cells and the weighted tile draw. Replaying a seed therefore replays the
whole grid, including which cell each step picked.

``next_below`` is the only draw the solver uses. It rejects the low tail
of the 32-bit range so every bound is sampled without modulo bias, which
caps a single draw at ``2**32`` outcomes (see ``types.MAX_TOTAL_WEIGHT``).

The generator is PCG-XSH-RR (64-bit state, 32-bit output),
https://www.pcg-random.org/.
"""

from __future__ import annotations

import random

SEED_MAX = 2**32 - 1


def random_seed() -> int:
    """Pick a fresh seed for runs where the caller did not supply one."""
    return random.randint(0, SEED_MAX)


class PCG32:
    """PCG-XSH-RR stream; ``seq`` picks one of several streams per seed."""

    _MASK32 = 0xFFFFFFFF
    _MASK64 = 0xFFFFFFFFFFFFFFFF
    _MUL = 6364136223846793005

    def __init__(self, seed: int, seq: int = 0) -> None:
        self._state: int = 0
        self._inc: int = ((seq << 1) | 1) & self._MASK64
        self._advance()
        self._state = (self._state + seed) & self._MASK64
        self._advance()

    def _advance(self) -> None:
        self._state = (self._state * self._MUL + self._inc) & self._MASK64

    def next_u32(self) -> int:
        old = self._state
        self._advance()
        xorshifted = (((old >> 18) ^ old) >> 27) & self._MASK32
        rot = (old >> 59) & 31
        return (
            (xorshifted >> rot) | (xorshifted << ((-rot) & 31))
        ) & self._MASK32

    def next_float(self) -> float:
        """Uniform float in [0, 1)."""
        return self.next_u32() / (self._MASK32 + 1)

    def next_below(self, bound: int) -> int:
        """Uniform integer in [0, bound) without modulo bias.

        Draws below ``2**32 % bound`` are rejected, so the number of values
        consumed per call is not fixed.
        """
        if bound <= 0:
            raise ValueError(f"bound must be positive, got {bound}")
        if bound > self._MASK32 + 1:
            raise ValueError(f"bound {bound} exceeds 32-bit range")
        threshold = (self._MASK32 + 1 - bound) % bound
        while True:
            r = self.next_u32()
            if r >= threshold:
                return r % bound

    def next_int(self, lo: int, hi: int) -> int:
        """Uniform integer in [lo, hi] inclusive."""
        return lo + self.next_below(hi - lo + 1)

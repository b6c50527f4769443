"""Deterministic pseudo-random source for demo data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

DEFAULT_SEED: Final[int] = 42

_MULTIPLIER: Final[int] = 1103515245
_INCREMENT: Final[int] = 12345
_MODULUS_MASK: Final[int] = 0x7FFFFFFF


@dataclass(slots=True)
class SeededRandom:
    """Linear congruential generator; each instance owns its state.

    Two instances built with the same seed yield the same sequence.
    """

    seed: int = DEFAULT_SEED

    def random(self) -> float:
        """Next value in ``[0, 1]``."""

        self.seed = (self.seed * _MULTIPLIER + _INCREMENT) & _MODULUS_MASK
        return self.seed / _MODULUS_MASK

    def chance(self, probability: float) -> bool:
        return self.random() < probability

"""Deterministic random utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(slots=True)
class RandomState:
    """Owned generator handle threaded through one simulation call."""

    seed: Optional[int]
    generator: np.random.Generator

    @classmethod
    def create(cls, seed: Optional[int] = None) -> "RandomState":
        return cls(seed=seed, generator=np.random.default_rng(seed))

    def spawn(self, offset: int) -> "RandomState":
        """Derive a child generator with deterministic offset."""

        bit_generator = self.generator.bit_generator.jumped(offset)
        child_seed = None if self.seed is None else self.seed + offset
        return RandomState(seed=child_seed, generator=np.random.Generator(bit_generator))


def choose_rng(seed: Optional[int] = None) -> RandomState:
    """Convenience helper to create a ``RandomState``."""

    return RandomState.create(seed)

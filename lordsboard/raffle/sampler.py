"""
Weighted index sampling with Vose's alias method.

Setup is O(n), each draw is O(1). The random source is injectable so draws can
be reproduced with a seeded ``random.Random``.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence

from lordsboard.utils.logger import get_logger

logger = get_logger(__name__)


class AliasSampler:
    """Draws indices with probability proportional to their weight."""

    def __init__(self, weights: Sequence[float], rng: Optional[random.Random] = None):
        if len(weights) == 0:
            raise ValueError("AliasSampler requires at least one weight")
        if any(w < 0 for w in weights):
            raise ValueError("AliasSampler weights must be non-negative")
        total = float(sum(weights))
        if total <= 0:
            raise ValueError("AliasSampler weights must have a positive sum")

        self._rng = rng or random.SystemRandom()
        self._n = len(weights)
        self.prob: List[float] = [w * self._n / total for w in weights]
        self.alias: List[int] = list(range(self._n))
        self._build_tables()

    def _build_tables(self) -> None:
        small = [i for i, p in enumerate(self.prob) if p < 1.0]
        large = [i for i, p in enumerate(self.prob) if p >= 1.0]

        while small and large:
            s = small.pop()
            l = large.pop()
            self.alias[s] = l
            self.prob[l] -= 1.0 - self.prob[s]
            if self.prob[l] < 1.0:
                small.append(l)
            else:
                large.append(l)

        # Leftovers only differ from 1 by rounding error
        for i in small + large:
            self.prob[i] = 1.0

    def __len__(self) -> int:
        return self._n

    def sample(self) -> int:
        i = self._rng.randrange(self._n)
        r = self._rng.random()
        return i if r < self.prob[i] else self.alias[i]


def weighted_choice(weights: Sequence[float], rng: Optional[random.Random] = None) -> int:
    """Draw a single index proportionally to ``weights``."""
    return AliasSampler(weights, rng).sample()

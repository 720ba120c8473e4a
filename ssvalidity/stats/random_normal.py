"""
Standard-normal deviates via the polar (Box-Muller) method.

The uniform source is an injectable ``numpy.random.Generator`` so runs are
reproducible from a seed and parallel workers can be handed independent
streams.
"""

import math
from typing import Optional, Tuple, Union

import numpy as np

SeedLike = Union[None, int, np.random.SeedSequence, np.random.Generator]


def _as_generator(rng: SeedLike) -> np.random.Generator:
    """Return *rng* unchanged if it is a Generator, else build one from it."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


class RandomNormal:
    """Pairs of independent N(0, 1) deviates.

    Uniform pairs ``(u1, u2)`` on ``(-1, 1)`` are drawn until they fall
    strictly inside the unit disk; the accepted pair is scaled by
    ``sqrt(-2 ln w / w)`` with ``w = u1**2 + u2**2``.

    Args:
        rng: A ``numpy.random.Generator``, a seed, a ``SeedSequence`` or
            ``None`` for fresh OS entropy.
    """

    def __init__(self, rng: SeedLike = None):
        self.rng = _as_generator(rng)

    def sample_pair(self) -> Tuple[float, float]:
        """Return ``(g1, g2)``, two independent standard-normal deviates."""
        while True:
            u1 = 2.0 * self.rng.random() - 1.0
            u2 = 2.0 * self.rng.random() - 1.0
            w = u1 * u1 + u2 * u2
            # w == 0 would divide by zero below
            if 0.0 < w < 1.0:
                break

        scale = math.sqrt((-2.0 * math.log(w)) / w)
        return u2 * scale, u1 * scale

    def sample_pairs(self, n: int, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Draw *n* pairs; returns an ``(n, 2)`` array."""
        if out is None:
            out = np.empty((n, 2), dtype=np.float64)
        for i in range(n):
            out[i, 0], out[i, 1] = self.sample_pair()
        return out

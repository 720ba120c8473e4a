"""
Sample generator for validity simulations.

Generates labeled and unlabeled examinees with a given latent
predictor-criterion correlation, attenuated by the reliabilities of the
observed predictor and criterion (classical test theory). Observed scores
are integers: the predictor is rounded half-up and clamped at zero, the
criterion is truncated toward zero on a 20 * z + 50 scale.
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.conditions import SimulationCondition
from .random_normal import RandomNormal, SeedLike

# Criterion scale: obs_y = trunc(CRIT_SCALE * z + CRIT_CENTER)
CRIT_SCALE = 20.0
CRIT_CENTER = 50.0


@dataclass
class Sample:
    """One replication's cases as parallel arrays (index i is case id i + 1).

    Attributes:
        obs_x: Observed integer predictor scores (>= 0).
        obs_y: Observed integer criterion scores.
        labeled: ``True`` for the first ``nl`` cases.
        num_items: Largest observed predictor score.
    """

    obs_x: np.ndarray
    obs_y: np.ndarray
    labeled: np.ndarray
    num_items: int

    @property
    def ids(self) -> np.ndarray:
        return np.arange(1, len(self.obs_x) + 1)

    @property
    def n_labeled(self) -> int:
        return int(np.count_nonzero(self.labeled))

    def __len__(self) -> int:
        return len(self.obs_x)


def generate_sample(condition: SimulationCondition, normal: Optional[RandomNormal] = None, rng: SeedLike = None) -> Sample:
    """Generate the ``nl + nu`` cases of one replication.

    Each case consumes two normal pairs: ``(x1, x2)`` build the latent
    predictor and criterion, ``(x3, x4)`` the measurement error.

    Args:
        condition: Condition parameters.
        normal: Normal-deviate source; built from *rng* when omitted.
        rng: Seed or generator used only when *normal* is ``None``.

    Returns:
        ``Sample`` with ``num_items`` set to the maximum ``obs_x``.

    Raises:
        ValueError: If a validity or reliability lies outside its valid
            range (square root of a negative number).
    """
    if normal is None:
        normal = RandomNormal(rng)

    rho = condition.pop_validity
    resid_y = math.sqrt(1 - rho**2)
    true_w_x = math.sqrt(condition.test_rel)
    err_w_x = math.sqrt(1 - condition.test_rel)
    true_w_y = math.sqrt(condition.crit_rel)
    err_w_y = math.sqrt(1 - condition.crit_rel)

    n = condition.n_total
    # case i consumes pairs 2i (x1, x2) and 2i + 1 (x3, x4)
    draws = normal.sample_pairs(2 * n)
    true_x, x2 = draws[0::2, 0], draws[0::2, 1]
    x3, x4 = draws[1::2, 0], draws[1::2, 1]

    true_y = rho * true_x + resid_y * x2

    raw_x = true_w_x * true_x + err_w_x * x3
    obs_x = np.floor(raw_x * condition.test_sd + condition.test_mn + 0.5).astype(np.int64)
    np.maximum(obs_x, 0, out=obs_x)

    raw_y = true_w_y * true_y + err_w_y * x4
    # truncated toward zero, unlike the predictor's rounding
    obs_y = np.trunc(CRIT_SCALE * raw_y + CRIT_CENTER).astype(np.int64)

    labeled = np.zeros(n, dtype=bool)
    labeled[: condition.nl] = True
    num_items = int(obs_x.max()) if n else 0

    return Sample(obs_x=obs_x, obs_y=obs_y, labeled=labeled, num_items=num_items)

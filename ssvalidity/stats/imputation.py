"""
Score-matching imputation.

For every attainable predictor score ``s`` in ``0..num_items`` the table
holds a donor pool: the criterion values of all labeled cases whose
predictor lies in the closed window ``|obs_x - s| <= mc``, where ``mc`` is
the smallest radius giving at least ``nmatch`` donors. Cases tied at the
boundary radius are all included, so a pool may exceed ``nmatch``.
Unlabeled cases receive one random draw from the pool of their score.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

import numpy as np

from ..errors import ConfigurationError


@dataclass
class ImputationTable:
    """Donor pools keyed by integer predictor score.

    Attributes:
        pools: ``score -> array of donor obs_y`` (in case-id order).
        radii: ``score -> matching window radius`` used for that pool.
        nmatch: Minimum pool size requested.
    """

    pools: Dict[int, np.ndarray]
    radii: Dict[int, int]
    nmatch: int

    def __getitem__(self, score: int) -> np.ndarray:
        return self.pools[score]

    def __contains__(self, score: int) -> bool:
        return score in self.pools

    def __len__(self) -> int:
        return len(self.pools)

    def __iter__(self) -> Iterator[int]:
        return iter(self.pools)

    @property
    def max_score(self) -> int:
        return max(self.pools)

    def items(self) -> Iterator[Tuple[int, np.ndarray]]:
        return iter(self.pools.items())


def _labeled_donors(obs_x: np.ndarray, obs_y: np.ndarray, labeled: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    labeled = np.asarray(labeled, dtype=bool)
    return np.asarray(obs_x)[labeled], np.asarray(obs_y)[labeled]


def build_imputation_table(
    obs_x: np.ndarray,
    obs_y: np.ndarray,
    labeled: np.ndarray,
    nmatch: int,
    num_items: int,
) -> ImputationTable:
    """Build the donor pool for every score ``0..num_items``.

    The minimal radius for score ``s`` is the ``nmatch``-th smallest
    distance ``|obs_x - s|`` over labeled cases; every labeled case at or
    inside that distance is a donor. This is the same selection as growing
    the window one unit at a time until it holds ``nmatch`` cases.

    Args:
        obs_x: Observed predictor scores of all cases.
        obs_y: Observed criterion scores of all cases.
        labeled: Boolean mask of labeled cases.
        nmatch: Minimum donor-pool size.
        num_items: Largest score needing a pool.

    Returns:
        ``ImputationTable`` with a pool for each score.

    Raises:
        ConfigurationError: If ``nmatch`` is not smaller than the number of
            labeled cases.
    """
    donor_x, donor_y = _labeled_donors(obs_x, obs_y, labeled)
    n_labeled = len(donor_x)
    if nmatch < 1:
        raise ConfigurationError(f"nmatch must be >= 1, got {nmatch}")
    if not nmatch < n_labeled:
        raise ConfigurationError(f"matching N > M! (nmatch={nmatch}, labeled cases={n_labeled})")

    pools: Dict[int, np.ndarray] = {}
    radii: Dict[int, int] = {}
    kth = nmatch - 1
    for score in range(int(num_items) + 1):
        distances = np.abs(donor_x - score)
        radius = int(np.partition(distances, kth)[kth])
        pools[score] = donor_y[distances <= radius].copy()
        radii[score] = radius

    return ImputationTable(pools=pools, radii=radii, nmatch=nmatch)


def build_imputation_table_from_sample(sample, nmatch: int) -> ImputationTable:
    """Convenience wrapper taking a ``Sample``."""
    return build_imputation_table(sample.obs_x, sample.obs_y, sample.labeled, nmatch, sample.num_items)


def impute(table: ImputationTable, score: int, rng: np.random.Generator) -> int:
    """Draw one criterion value uniformly from the donor pool of *score*.

    Raises:
        KeyError: If *score* lies outside the table's range.
    """
    pool = table.pools[int(score)]
    return int(pool[rng.integers(len(pool))])


def impute_criterion(table: ImputationTable, obs_x: np.ndarray, obs_y: np.ndarray, labeled: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Return ``y``: ``obs_y`` for labeled cases, an independent donor draw otherwise."""
    y = np.array(obs_y, dtype=np.int64, copy=True)
    for i in np.flatnonzero(~np.asarray(labeled, dtype=bool)):
        y[i] = impute(table, obs_x[i], rng)
    return y

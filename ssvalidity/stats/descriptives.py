"""
Descriptive statistics used by the simulation and the report.

All functions take a finite, non-empty numeric sequence. The quartile
estimator in ``interquartile_range`` is deliberately simple: the lower
quartile averages the sorted values at ``n // 4`` and ``n // 4 + 1``, the
upper quartile those at ``n - n // 4 - 1`` and ``n - n // 4``. Reported
results depend on it, so it is not a textbook quantile.
"""

from typing import Sequence, Tuple, Union

import numpy as np

from ..errors import DegenerateDataError

ArrayLike = Union[Sequence[float], np.ndarray]


def _as_array(values: ArrayLike, name: str = "values") -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional")
    if arr.size == 0:
        raise ValueError(f"{name} must not be empty")
    return arr


def mean(values: ArrayLike) -> float:
    """Arithmetic mean."""
    arr = _as_array(values)
    return float(arr.sum() / arr.size)


def std_dev(values: ArrayLike) -> float:
    """Sample standard deviation (divides by ``n - 1``).

    Raises:
        ValueError: For fewer than two values.
    """
    arr = _as_array(values)
    if arr.size < 2:
        raise ValueError("std_dev requires at least 2 values")
    sq_dev_sum = float(np.sum((arr.mean() - arr) ** 2))
    return float(np.sqrt(sq_dev_sum / (arr.size - 1)))


def _sorted_median(data: np.ndarray) -> float:
    n = data.size
    if n % 2:
        return float(data[n // 2])
    return (float(data[n // 2]) + float(data[n // 2 - 1])) / 2.0


def median(values: ArrayLike) -> float:
    """Middle value, or the mean of the two middle values for even ``n``."""
    return _sorted_median(np.sort(_as_array(values)))


def interquartile_range(values: ArrayLike) -> Tuple[float, float, float]:
    """Return ``(pct25, pct50, pct75)``.

    Raises:
        ValueError: For fewer than four values (the upper index would
            fall past the end of the data).
    """
    data = np.sort(_as_array(values))
    n = data.size
    if n < 4:
        raise ValueError("interquartile_range requires at least 4 values")

    thres = n // 4
    pct25 = (float(data[thres]) + float(data[thres + 1])) / 2.0
    pct75 = (float(data[n - thres]) + float(data[n - thres - 1])) / 2.0
    pct50 = _sorted_median(data)
    return pct25, pct50, pct75


def pearson_correlation(xs: ArrayLike, ys: ArrayLike) -> float:
    """Product-moment correlation of two equally long sequences.

    Raises:
        ValueError: If the lengths differ or fewer than two pairs are given.
        DegenerateDataError: If either sequence has zero variance.
    """
    x = _as_array(xs, "xs")
    y = _as_array(ys, "ys")
    if x.size != y.size:
        raise ValueError(f"xs and ys must have equal length, got {x.size} and {y.size}")
    if x.size < 2:
        raise ValueError("pearson_correlation requires at least 2 pairs")

    dx = x - x.mean()
    dy = y - y.mean()
    sxx = float(np.dot(dx, dx))
    syy = float(np.dot(dy, dy))
    if sxx == 0.0 or syy == 0.0:
        raise DegenerateDataError("correlation undefined: zero variance in " + ("xs" if sxx == 0.0 else "ys"))

    r = float(np.dot(dx, dy)) / np.sqrt(sxx * syy)
    # guard against |r| drifting past 1 by rounding
    return float(min(1.0, max(-1.0, r)))

"""
Validation utilities for SSValidity.

This module provides validation functions for study configuration,
simulation conditions and runner settings.
"""

from dataclasses import dataclass
from numbers import Integral, Real
from typing import Any, List, Optional, Sequence, Tuple, Union

from ..errors import ConfigurationError

__all__ = []


@dataclass
class _ValidationResult:
    """Outcome of a validation check, carrying errors and warnings.

    Attributes:
        is_valid: ``True`` if no errors were found.
        errors: List of error messages (empty when valid).
        warnings: List of non-fatal warning messages.
    """

    is_valid: bool
    errors: List[str]
    warnings: List[str]

    def raise_if_invalid(self):
        """Raise ``ConfigurationError`` if the validation failed."""
        if not self.is_valid:
            error_msg = "Validation failed:\n" + "\n".join(f"• {err}" for err in self.errors)
            raise ConfigurationError(error_msg)

    def merge(self, other: "_ValidationResult") -> "_ValidationResult":
        """Combine two results into one (errors and warnings concatenated)."""
        errors = self.errors + other.errors
        return _ValidationResult(len(errors) == 0, errors, self.warnings + other.warnings)


class _Validator:
    """Static helpers for type and range checks used by all validators."""

    @staticmethod
    def _check_type(value: Any, expected_types: tuple, name: str) -> Optional[str]:
        """Check if value has expected type (``bool`` is never accepted as a number)."""
        if isinstance(value, bool) or not isinstance(value, expected_types):
            actual_type = type(value).__name__
            expected = expected_types[0].__name__ if len(expected_types) == 1 else f"one of {[t.__name__ for t in expected_types]}"
            return f"{name} must be {expected}, got {actual_type}"
        return None

    @staticmethod
    def _check_range(
        value: Union[int, float],
        min_val: Optional[float],
        max_val: Optional[float],
        name: str,
        min_exclusive: bool = False,
    ) -> Optional[str]:
        """Check if value is within range."""
        if min_val is not None:
            if min_exclusive and value <= min_val:
                return f"{name} must be > {min_val}, got {value}"
            if not min_exclusive and value < min_val:
                return f"{name} must be >= {min_val}, got {value}"
        if max_val is not None and value > max_val:
            return f"{name} must be <= {max_val}, got {value}"
        return None


_validator = _Validator()


def _validate_numeric_parameter(
    value: Any,
    name: str,
    expected_types: tuple = (Real,),
    min_val: Optional[float] = None,
    max_val: Optional[float] = None,
    min_exclusive: bool = False,
) -> _ValidationResult:
    """Generic validation for numeric parameters."""
    errors: List[str] = []
    warnings: List[str] = []

    type_error = _validator._check_type(value, expected_types, name)
    if type_error:
        errors.append(type_error)
        return _ValidationResult(False, errors, warnings)

    range_error = _validator._check_range(value, min_val, max_val, name, min_exclusive)
    if range_error:
        errors.append(range_error)

    return _ValidationResult(len(errors) == 0, errors, warnings)


def _validate_int_list(values: Any, name: str, min_val: int) -> _ValidationResult:
    """Validate a non-empty list of integers, each >= *min_val*."""
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence) or len(values) == 0:
        return _ValidationResult(False, [f"{name} must be a non-empty list of integers"], [])

    result = _ValidationResult(True, [], [])
    for i, value in enumerate(values):
        result = result.merge(_validate_numeric_parameter(value, f"{name}[{i}]", (Integral,), min_val=min_val))
    if len(set(values)) != len(values):
        result.warnings.append(f"{name} contains duplicate values; duplicated conditions are run once")
    return result


def _validate_population_validities(values: Any) -> _ValidationResult:
    """Validate the population-validity grid (each value in [-1, 1])."""
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence) or len(values) == 0:
        return _ValidationResult(False, ["population_validities must be a non-empty list of numbers"], [])

    result = _ValidationResult(True, [], [])
    for i, value in enumerate(values):
        result = result.merge(_validate_numeric_parameter(value, f"population_validities[{i}]", min_val=-1.0, max_val=1.0))
    return result


def _validate_reliability(value: Any, name: str) -> _ValidationResult:
    """Validate a reliability coefficient in (0, 1]."""
    return _validate_numeric_parameter(value, name, min_val=0.0, max_val=1.0, min_exclusive=True)


def _validate_replications(replications: Any) -> _ValidationResult:
    """Validate number of replications per condition."""
    result = _validate_numeric_parameter(replications, "replications", (Integral,), min_val=1)
    if result.is_valid and replications < 100:
        result.warnings.append(f"Low replication count ({replications}). Consider at least 100 for stable summaries.")
    return result


def _validate_nmatch(nmatch: Any, labeled_sizes: Sequence[int]) -> _ValidationResult:
    """Validate the minimum donor-pool size against the labeled sample sizes.

    The imputation table needs strictly more labeled cases than ``nmatch``.
    """
    result = _validate_numeric_parameter(nmatch, "nmatch", (Integral,), min_val=1)
    if not result.is_valid:
        return result

    try:
        too_small = [nl for nl in labeled_sizes if isinstance(nl, Integral) and nl <= nmatch]
    except TypeError:
        too_small = []
    if too_small:
        result.errors.append(f"nmatch ({nmatch}) must be smaller than every labeled sample size; offending sizes: {too_small}")
        result.is_valid = False
    return result


def _validate_study_config(config: Any) -> _ValidationResult:
    """Validate every field of a ``StudyConfig``."""
    result = _validate_int_list(config.labeled_sizes, "labeled_sizes", min_val=1)
    result = result.merge(_validate_int_list(config.unlabeled_sizes, "unlabeled_sizes", min_val=0))
    result = result.merge(_validate_population_validities(config.population_validities))
    result = result.merge(_validate_replications(config.replications))
    result = result.merge(_validate_numeric_parameter(config.test_length, "test_length", (Integral,), min_val=1))
    result = result.merge(_validate_reliability(config.criterion_reliability, "criterion_reliability"))
    result = result.merge(_validate_reliability(config.test_reliability, "test_reliability"))
    result = result.merge(_validate_nmatch(config.nmatch, config.labeled_sizes if isinstance(config.labeled_sizes, Sequence) else []))
    return result


def _validate_parallel_settings(enable: Any, n_cores: Optional[int]) -> Tuple[Tuple[bool, int], _ValidationResult]:
    """Validate parallel processing settings.

    Returns:
        ``((enabled, n_cores), result)``; ``n_cores`` defaults to half the
        available CPUs.
    """
    import multiprocessing as mp

    errors = []
    if not isinstance(enable, bool):
        errors.append(f"parallel must be True or False, got {enable!r}")

    max_cores = mp.cpu_count() or 1
    if n_cores is None:
        n_cores = max(1, max_cores // 2)
    elif isinstance(n_cores, bool) or not isinstance(n_cores, int) or n_cores < 1:
        errors.append(f"n_cores must be a positive integer, got {n_cores!r}")
    elif n_cores > max_cores:
        n_cores = max_cores

    return (bool(enable), n_cores), _ValidationResult(len(errors) == 0, errors, [])


_FAILURE_POLICIES = ("raise", "skip")


def _validate_failure_policy(on_failure: Any, max_failed: Any) -> _ValidationResult:
    """Validate the per-replication failure policy and its tolerance."""
    errors = []
    if on_failure not in _FAILURE_POLICIES:
        errors.append(f"on_failure must be one of {_FAILURE_POLICIES}, got {on_failure!r}")
    result = _ValidationResult(len(errors) == 0, errors, [])
    return result.merge(_validate_numeric_parameter(max_failed, "max_failed_replications", min_val=0.0, max_val=1.0))

"""
Exception types raised by SSValidity.

Configuration problems are detected before any simulation work starts
(or, for the matching pool, when an imputation table is built) and always
abort the run. Numerical degeneracy is raised per replication and is
handled according to the runner's failure policy.
"""


class ConfigurationError(ValueError):
    """Raised for invalid study or condition parameters."""

    pass


class DegenerateDataError(ArithmeticError):
    """Raised when a statistic is undefined for the given data (e.g. zero variance)."""

    pass


class DuplicateResultError(KeyError):
    """Raised when a (condition, replication) result is recorded twice."""

    pass


class SimulationCancelled(Exception):
    """Raised between replications when ``cancel_check`` asks to stop."""

    pass

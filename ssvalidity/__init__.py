"""SSValidity - semi-supervised validity simulation.

A Monte Carlo framework comparing validity coefficients estimated from
labeled cases only (supervised) with estimates that add unlabeled cases
whose criterion is imputed by score matching (semi-supervised), across a
grid of population validities and labeled/unlabeled sample sizes.

Example:
    >>> from ssvalidity import ValidityStudy
    >>>
    >>> study = ValidityStudy(population_validities=[0.4], labeled_sizes=[100],
    ...                       unlabeled_sizes=[200], replications=500)
    >>> study.run()
"""

from importlib.metadata import version as _get_version

from .core import ReplicationResult, ResultsStore, SimulationCondition, StudyConfig
from .errors import ConfigurationError, DegenerateDataError, DuplicateResultError, SimulationCancelled
from .model import ValidityStudy
from .progress import PrintReporter, ProgressReporter, ProgressUpdate, TqdmReporter

__version__ = _get_version("SSValidity")

__all__ = [
    "ValidityStudy",
    "StudyConfig",
    "SimulationCondition",
    "ResultsStore",
    "ReplicationResult",
    "ConfigurationError",
    "DegenerateDataError",
    "DuplicateResultError",
    "SimulationCancelled",
    "ProgressReporter",
    "ProgressUpdate",
    "PrintReporter",
    "TqdmReporter",
]

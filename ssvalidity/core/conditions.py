"""
Study configuration and simulation conditions.

``StudyConfig`` holds the full experimental grid plus the fixed
psychometric parameters; ``SimulationCondition`` is one cell of that grid
(population validity x labeled size x unlabeled size) and drives a single
replication.
"""

from dataclasses import dataclass, field
from itertools import product
from typing import Any, Dict, List, Optional, Tuple

from ..errors import ConfigurationError
from ..utils.validators import _validate_study_config

# Predictor raw-score mean and SD as fractions of the test length
TEST_MEAN_FRACTION = 0.67
TEST_SD_FRACTION = 0.10

# (pop_validity, nl, nu): identifies a condition in the results store
ConditionKey = Tuple[float, int, int]


def _format_validity(rho: float) -> str:
    """Two decimals, or the shortest exact form when two decimals would round."""
    text = f"{rho:.2f}"
    return text if float(text) == rho else repr(float(rho))


@dataclass(frozen=True)
class StudyConfig:
    """Experimental grid and fixed parameters for a validity study.

    Attributes:
        labeled_sizes: Numbers of labeled cases (criterion observed).
        unlabeled_sizes: Numbers of unlabeled cases (criterion imputed).
        population_validities: Latent predictor-criterion correlations.
        replications: Replications per condition.
        test_length: Number of test items; fixes predictor mean and SD.
        criterion_reliability: Reliability of the observed criterion.
        test_reliability: Reliability of the observed predictor.
        nmatch: Minimum donor-pool size for score matching.
    """

    labeled_sizes: List[int] = field(default_factory=lambda: [20, 50, 100, 200, 500])
    unlabeled_sizes: List[int] = field(default_factory=lambda: [20, 50, 100, 200, 500, 1000])
    population_validities: List[float] = field(default_factory=lambda: [0.0, 0.20, 0.30, 0.40, 0.60, 0.80])
    replications: int = 500
    test_length: int = 30
    criterion_reliability: float = 0.70
    test_reliability: float = 0.80
    nmatch: int = 5

    @property
    def test_mean(self) -> float:
        return TEST_MEAN_FRACTION * self.test_length

    @property
    def test_sd(self) -> float:
        return TEST_SD_FRACTION * self.test_length

    def validate(self) -> List[str]:
        """Raise ``ConfigurationError`` on invalid settings; return warnings."""
        result = _validate_study_config(self)
        result.raise_if_invalid()
        return result.warnings

    def conditions(self) -> List["SimulationCondition"]:
        """Cross product of validities x labeled sizes x unlabeled sizes, in that nesting order."""
        return build_condition_grid(self)

    @property
    def n_conditions(self) -> int:
        return len(self.conditions())

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "StudyConfig":
        """Build a config from a mapping keyed by field name; unknown keys are rejected."""
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration option(s): {', '.join(unknown)}")
        values = {k: list(v) if isinstance(v, (list, tuple)) else v for k, v in options.items()}
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


@dataclass(frozen=True)
class SimulationCondition:
    """One cell of the study grid.

    Defaults for everything except ``pop_validity`` match a standalone
    single-condition run. ``pop_validity`` is mandatory.
    """

    pop_validity: Optional[float]
    nl: int = 100
    nu: int = 200
    crit_rel: float = 0.80
    test_rel: float = 0.80
    test_mn: float = 20.0
    test_sd: float = 3.0
    nmatch: int = 20

    def __post_init__(self):
        if self.pop_validity is None:
            raise ConfigurationError("No population validity!")
        if self.nl < 0 or self.nu < 0:
            raise ConfigurationError(f"Sample sizes must be non-negative, got nl={self.nl}, nu={self.nu}")
        if self.nmatch < 1:
            raise ConfigurationError(f"nmatch must be >= 1, got {self.nmatch}")

    @classmethod
    def from_config(cls, config: StudyConfig, pop_validity: float, nl: int, nu: int) -> "SimulationCondition":
        return cls(
            pop_validity=pop_validity,
            nl=nl,
            nu=nu,
            crit_rel=config.criterion_reliability,
            test_rel=config.test_reliability,
            test_mn=config.test_mean,
            test_sd=config.test_sd,
            nmatch=config.nmatch,
        )

    @property
    def n_total(self) -> int:
        return self.nl + self.nu

    @property
    def key(self) -> ConditionKey:
        return (float(self.pop_validity), self.nl, self.nu)

    @property
    def label(self) -> str:
        """Display name, e.g. ``"rho=0.40,NL=100,NU=200"``; distinct keys give distinct labels."""
        return f"rho={_format_validity(self.pop_validity)},NL={self.nl},NU={self.nu}"

    def __str__(self) -> str:
        return self.label


def build_condition_grid(config: StudyConfig) -> List[SimulationCondition]:
    """Expand *config* into its conditions, dropping repeated grid values."""
    validities = list(dict.fromkeys(config.population_validities))
    labeled = list(dict.fromkeys(config.labeled_sizes))
    unlabeled = list(dict.fromkeys(config.unlabeled_sizes))
    return [SimulationCondition.from_config(config, rho, nl, nu) for rho, nl, nu in product(validities, labeled, unlabeled)]

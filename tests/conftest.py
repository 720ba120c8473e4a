"""
Shared pytest fixtures for SSValidity tests.
"""

import numpy as np
import pytest

from ssvalidity.core import SimulationCondition, StudyConfig
from tests.config import (
    REF_CRIT_REL,
    REF_NL,
    REF_NMATCH,
    REF_NU,
    REF_RHO,
    REF_TEST_LENGTH,
    REF_TEST_REL,
    SEED,
)


@pytest.fixture
def rng():
    """Seeded numpy Generator."""
    return np.random.default_rng(SEED)


@pytest.fixture
def reference_config():
    """Single-condition config: rho=0.40, NL=100, NU=200."""
    return StudyConfig(
        labeled_sizes=[REF_NL],
        unlabeled_sizes=[REF_NU],
        population_validities=[REF_RHO],
        replications=5,
        test_length=REF_TEST_LENGTH,
        criterion_reliability=REF_CRIT_REL,
        test_reliability=REF_TEST_REL,
        nmatch=REF_NMATCH,
    )


@pytest.fixture
def reference_condition(reference_config):
    """The one condition of ``reference_config``."""
    return SimulationCondition.from_config(reference_config, REF_RHO, REF_NL, REF_NU)


@pytest.fixture
def small_config():
    """Four small conditions for fast end-to-end runs."""
    return StudyConfig(
        labeled_sizes=[30],
        unlabeled_sizes=[0, 40],
        population_validities=[0.3, 0.6],
        replications=5,
        nmatch=5,
    )


@pytest.fixture
def suppress_output(capsys):
    """Swallow stdout/stderr produced by a run."""
    yield
    capsys.readouterr()


@pytest.fixture
def write_json():
    import json

    def _write(path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    return _write

"""Core components for the SSValidity framework.

Re-exports the foundational building blocks:

- ``StudyConfig``, ``SimulationCondition``,
  ``build_condition_grid`` — study grid and typed records.
- ``SimulationRunner``, ``run_replication``, ``replication_seed`` — Monte
  Carlo execution.
- ``ResultsStore``, ``ReplicationResult``, ``ResultsProcessor``,
  ``ConditionSummary`` — result storage and per-condition summaries.
"""

from .conditions import SimulationCondition, StudyConfig, build_condition_grid
from .results import ConditionSummary, ReplicationResult, ResultsProcessor, ResultsStore, build_run_result
from .simulation import SimulationRunner, replication_seed, run_replication

__all__ = [
    # Conditions
    "StudyConfig",
    "SimulationCondition",
    "build_condition_grid",
    # Simulation
    "SimulationRunner",
    "run_replication",
    "replication_seed",
    # Results
    "ResultsStore",
    "ReplicationResult",
    "ResultsProcessor",
    "ConditionSummary",
    "build_run_result",
]

"""
Simulation execution for SSValidity.

This module contains the Monte Carlo loop: for every condition and
replication it generates a sample, builds the score-matching imputation
table, fills in the criterion for unlabeled cases and records the
supervised and semi-supervised validity coefficients.
"""

import warnings
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError, SimulationCancelled
from ..stats import data_generation, descriptives, imputation
from ..stats.random_normal import RandomNormal
from ..utils.formatters import _format_condition_options, _format_progress_line
from ..utils.validators import _validate_failure_policy, _validate_parallel_settings
from .conditions import SimulationCondition
from .results import ResultsStore


def replication_seed(entropy: int, condition_index: int, replication: int) -> np.random.SeedSequence:
    """Independent seed sequence for one (condition, replication) pair.

    The spawn key makes every stream distinct and independent of the order
    in which replications are executed, so sequential and parallel runs
    agree exactly.
    """
    return np.random.SeedSequence(entropy, spawn_key=(condition_index, replication))


def run_replication(condition: SimulationCondition, seed: Any = None) -> Tuple[float, float]:
    """Run one replication and return ``(r_sup, r_semi)``.

    Args:
        condition: Condition parameters.
        seed: Anything accepted by ``numpy.random.default_rng``.

    Raises:
        ConfigurationError: If ``nmatch`` is not below the labeled count.
        DegenerateDataError: If a correlation is undefined (zero variance).
    """
    rng = np.random.default_rng(seed)
    sample = data_generation.generate_sample(condition, RandomNormal(rng))
    table = imputation.build_imputation_table_from_sample(sample, condition.nmatch)
    y = imputation.impute_criterion(table, sample.obs_x, sample.obs_y, sample.labeled, rng)

    labeled = sample.labeled
    r_sup = descriptives.pearson_correlation(sample.obs_x[labeled], y[labeled])
    r_semi = descriptives.pearson_correlation(sample.obs_x, y)
    return r_sup, r_semi


def _replication_task(condition: SimulationCondition, seed: np.random.SeedSequence, replication: int, skip_failures: bool) -> Dict[str, Any]:
    """Worker entry point; returns a plain dict so it pickles across processes."""
    if not skip_failures:
        r_sup, r_semi = run_replication(condition, seed)
        return {"replication": replication, "r_sup": r_sup, "r_semi": r_semi}

    try:
        r_sup, r_semi = run_replication(condition, seed)
    except ConfigurationError:
        raise
    except Exception as e:
        return {"replication": replication, "failed": True, "failure_reason": f"{type(e).__name__}: {e}"}
    return {"replication": replication, "r_sup": r_sup, "r_semi": r_semi}


class SimulationRunner:
    """Executes the condition x replication grid.

    Each replication is an independent unit of work seeded from its own
    ``SeedSequence``. Results go into a ``ResultsStore``; nothing else is
    carried between replications.
    """

    def __init__(
        self,
        replications: int,
        seed: Optional[int] = None,
        verbose: int = 1,
        parallel: bool = False,
        n_cores: int = 1,
        on_failure: str = "raise",
        max_failed_replications: float = 0.05,
    ):
        """Initialise the simulation runner.

        Args:
            replications: Replications per condition.
            seed: Base entropy. ``None`` draws fresh entropy once per run.
            verbose: ``0`` silent, ``1`` one progress line per replication,
                ``2`` also the options block of every condition.
            parallel: Distribute a condition's replications with joblib.
            n_cores: Worker processes when *parallel* is enabled.
            on_failure: ``"raise"`` aborts on the first failed replication;
                ``"skip"`` drops it with a warning.
            max_failed_replications: Largest tolerated proportion of failed
                replications per condition under ``"skip"`` (0-1).
        """
        _validate_failure_policy(on_failure, max_failed_replications).raise_if_invalid()
        (parallel, n_cores), result = _validate_parallel_settings(parallel, n_cores)
        result.raise_if_invalid()

        self.replications = replications
        self.seed = seed
        self.verbose = verbose
        self.parallel = parallel
        self.n_cores = n_cores
        self.on_failure = on_failure
        self.max_failed_replications = max_failed_replications

    def run(
        self,
        conditions: Sequence[SimulationCondition],
        store: Optional[ResultsStore] = None,
        progress=None,
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> Dict[str, Any]:
        """Run every replication of every condition.

        Args:
            conditions: Conditions in execution (and report) order.
            store: Store to fill; a new one is created when omitted.
            progress: Optional ``ProgressReporter``, told when each
                condition begins and advanced per finished replication
                (per condition in parallel mode).
            cancel_check: Optional callable returning ``True`` to abort.

        Returns:
            Dict with keys ``"store"``, ``"n_replications_failed"`` and
            ``"failure_reasons"``.

        Raises:
            ConfigurationError: On an impossible matching pool.
            SimulationCancelled: If *cancel_check* requests it.
            RuntimeError: Under ``"skip"``, when a condition's failure rate
                exceeds ``max_failed_replications``.
        """
        if store is None:
            store = ResultsStore()
        entropy = self.seed if self.seed is not None else np.random.SeedSequence().entropy

        n_failed = 0
        failure_reasons: Dict[str, int] = {}

        for index, condition in enumerate(conditions):
            if self.verbose >= 2:
                print(_format_condition_options(condition, self.replications), flush=True)

            if progress is not None:
                progress.begin_condition(index)
            outcomes = self._run_condition(index, condition, entropy, progress, cancel_check)

            condition_failed = 0
            for outcome in outcomes:
                if outcome.get("failed"):
                    condition_failed += 1
                    reason = outcome["failure_reason"]
                    failure_reasons[reason] = failure_reasons.get(reason, 0) + 1
                    continue
                result = store.record(condition, outcome["replication"], outcome["r_sup"], outcome["r_semi"])
                if self.verbose >= 1:
                    print(_format_progress_line(result.condition, result.replication, result.r_sup, result.r_semi), flush=True)

            n_failed += condition_failed
            self._check_failures(condition, condition_failed)

        return {
            "store": store,
            "n_replications_failed": n_failed,
            "failure_reasons": failure_reasons,
        }

    def _check_failures(self, condition: SimulationCondition, n_failed: int) -> None:
        if n_failed == 0:
            return
        if n_failed == self.replications:
            raise RuntimeError(f"All replications failed for {condition.label}")

        failed_pct = n_failed / self.replications
        if failed_pct > self.max_failed_replications:
            raise RuntimeError(
                f"Too many failed replications for {condition.label}: {n_failed}/{self.replications} "
                f"({failed_pct:.1%}), threshold: {self.max_failed_replications:.1%}"
            )
        warnings.warn(f"{n_failed} replications failed for {condition.label} ({failed_pct:.1%}) and were skipped", stacklevel=3)

    def _run_condition(
        self,
        index: int,
        condition: SimulationCondition,
        entropy: int,
        progress,
        cancel_check: Optional[Callable[[], bool]],
    ) -> List[Dict[str, Any]]:
        """Run one condition's replications, in parallel when enabled."""
        skip = self.on_failure == "skip"
        reps = range(1, self.replications + 1)

        if self.parallel and self.n_cores > 1:
            try:
                from joblib import Parallel, delayed
            except ImportError:
                warnings.warn("joblib not available, continuing with sequential processing. Install with: pip install joblib", stacklevel=3)
                self.parallel = False
            else:
                try:
                    generator = Parallel(n_jobs=self.n_cores, backend="loky", verbose=0, return_as="generator")(
                        delayed(_replication_task)(condition, replication_seed(entropy, index, rep), rep, skip) for rep in reps
                    )
                    outcomes = []
                    for outcome in generator:
                        if cancel_check is not None and cancel_check():
                            raise SimulationCancelled("Simulation cancelled by user")
                        outcomes.append(outcome)
                except (SimulationCancelled, ConfigurationError, ArithmeticError, ValueError):
                    raise
                except Exception as e:
                    warnings.warn(f"Parallel execution failed ({e}). Falling back to sequential.", stacklevel=3)
                else:
                    if progress is not None:
                        progress.advance(len(outcomes))
                    return outcomes

        outcomes = []
        for rep in reps:
            if cancel_check is not None and cancel_check():
                raise SimulationCancelled("Simulation cancelled by user")
            outcomes.append(_replication_task(condition, replication_seed(entropy, index, rep), rep, skip))
            if progress is not None:
                progress.advance(1)
        return outcomes

"""
SSValidity - semi-supervised validity simulation.

This module provides the main ValidityStudy class for comparing supervised
and score-matching semi-supervised validity estimates by Monte Carlo
simulation.
"""

import dataclasses
import warnings
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from .core import (
    ResultsProcessor,
    ResultsStore,
    SimulationCondition,
    SimulationRunner,
    StudyConfig,
    build_run_result,
)
from .utils.formatters import _format_summary_line
from .utils.validators import _validate_failure_policy, _validate_parallel_settings
from .utils.visualization import _create_validity_plot


class ValidityStudy:
    """Monte Carlo study of semi-supervised validity estimation.

    For every condition of the configured grid (population validity x
    labeled size x unlabeled size) the study runs ``replications``
    independent replications. Each replication generates labeled and
    unlabeled examinees, imputes the criterion of unlabeled examinees by
    score matching against the labeled ones, and records the supervised
    (labeled only) and semi-supervised (all cases) validity coefficients.

    Configuration setters return ``self`` for method chaining.

    Attributes:
        config: The ``StudyConfig`` describing the grid.
        seed: Random seed for reproducibility (default: 2137).
        verbose: Output level (0 silent, 1 progress lines, 2 also
            condition options).
        parallel: Run replications with joblib (default: ``False``).
        n_cores: Worker processes for parallel runs.
        on_failure: ``"raise"`` (default) or ``"skip"``.
        max_failed_replications: Tolerated failure proportion for
            ``"skip"`` (default: 0.05).
        cumulative_report: Accumulate replications across conditions in
            the report (default: ``False``).

    Example:
        >>> study = ValidityStudy(population_validities=[0.4], labeled_sizes=[100],
        ...                       unlabeled_sizes=[200], replications=500)
        >>> study.set_seed(42).run()
        >>> study.report()
    """

    def __init__(self, config: Optional[StudyConfig] = None, **options: Any):
        """Initialise a study.

        Args:
            config: Base configuration; defaults to ``StudyConfig()``.
            **options: ``StudyConfig`` field overrides.

        Raises:
            ConfigurationError: If the resulting configuration is invalid.
        """
        base = config if config is not None else StudyConfig()
        self.config = dataclasses.replace(base, **options) if options else base
        for message in self.config.validate():
            warnings.warn(message, UserWarning, stacklevel=2)

        self.seed: Optional[int] = 2137
        self.verbose = 1
        self.parallel = False
        self.n_cores = 1
        self.on_failure = "raise"
        self.max_failed_replications = 0.05
        self.cumulative_report = False

        self._store: Optional[ResultsStore] = None
        self._run_info: Optional[Dict[str, Any]] = None

    # =========================================================================
    # Configuration methods
    # =========================================================================

    def set_seed(self, seed: Optional[int] = None):
        """Set random seed for reproducibility.

        Args:
            seed: Non-negative integer, or ``None`` for fresh entropy.

        Returns:
            self: For method chaining.

        Raises:
            TypeError: If *seed* is not an integer or ``None``.
            ValueError: If *seed* is negative.
        """
        if seed is not None:
            if isinstance(seed, bool) or not isinstance(seed, int):
                raise TypeError("seed must be an integer or None")
            if seed < 0:
                raise ValueError("seed must be non-negative")

        self.seed = seed
        return self

    def set_parallel(self, enable: bool = True, n_cores: Optional[int] = None):
        """Enable or disable parallel replications.

        Requires ``joblib``; without it the run continues sequentially
        with a warning. Results are identical either way for a given seed.

        Args:
            enable: ``True`` for parallel, ``False`` for sequential.
            n_cores: Worker processes. Defaults to ``cpu_count // 2``.

        Returns:
            self: For method chaining.
        """
        if enable is False:
            self.parallel, self.n_cores = False, 1
            return self

        settings, result = _validate_parallel_settings(enable, n_cores)
        result.raise_if_invalid()
        self.parallel, self.n_cores = settings
        return self

    def set_verbose(self, level: int = 1):
        """Set output level (0, 1 or 2)."""
        if level not in (0, 1, 2):
            raise ValueError(f"verbose level must be 0, 1 or 2, got {level!r}")
        self.verbose = level
        return self

    def set_failure_policy(self, on_failure: str = "raise", max_failed_replications: float = 0.05):
        """Choose how failed replications are handled.

        Args:
            on_failure: ``"raise"`` aborts the run; ``"skip"`` drops the
                replication with a warning.
            max_failed_replications: Under ``"skip"``, the largest failure
                proportion per condition before the run aborts.

        Returns:
            self: For method chaining.
        """
        _validate_failure_policy(on_failure, max_failed_replications).raise_if_invalid()
        self.on_failure = on_failure
        self.max_failed_replications = max_failed_replications
        return self

    def set_cumulative_report(self, enable: bool = True):
        """Accumulate replications across conditions in the report."""
        self.cumulative_report = bool(enable)
        return self

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def conditions(self) -> List[SimulationCondition]:
        return self.config.conditions()

    @property
    def total_replications(self) -> int:
        return self.config.replications * len(self.conditions)

    @property
    def store(self) -> ResultsStore:
        if self._store is None:
            raise RuntimeError("No results yet; call run() first")
        return self._store

    # =========================================================================
    # Running and reporting
    # =========================================================================

    def run(
        self,
        print_results: bool = True,
        return_results: bool = False,
        progress_callback=None,
        cancel_check: Optional[Callable[[], bool]] = None,
    ):
        """Run every replication of every condition.

        Args:
            print_results: Print the per-condition summary when done.
            return_results: Return the run dictionary.
            progress_callback: ``None``/``False`` for no progress display, or
                a callable taking a ``ProgressUpdate`` such as
                ``PrintReporter()`` or ``TqdmReporter()``.
            cancel_check: Optional callable returning ``True`` to abort.

        Returns:
            dict or None: With *return_results*, a dict with keys
            ``"store"``, ``"summaries"``, ``"n_replications_used"``,
            ``"n_replications_failed"``, ``"failure_reasons"`` and
            ``"max_abs_difference"``.
        """
        from .progress import ProgressReporter

        reporter = None
        if progress_callback:
            reporter = ProgressReporter([c.label for c in self.conditions], self.config.replications, progress_callback)

        runner = SimulationRunner(
            replications=self.config.replications,
            seed=self.seed,
            verbose=self.verbose,
            parallel=self.parallel,
            n_cores=self.n_cores,
            on_failure=self.on_failure,
            max_failed_replications=self.max_failed_replications,
        )
        try:
            self._run_info = runner.run(self.conditions, ResultsStore(), progress=reporter, cancel_check=cancel_check)
        finally:
            if reporter is not None:
                reporter.close()
        self._store = self._run_info["store"]

        if print_results:
            self.report()

        if return_results:
            processor = ResultsProcessor(cumulative=self.cumulative_report)
            return build_run_result(
                self._store,
                processor.summarize(self._store),
                n_failed=self._run_info["n_replications_failed"],
                failure_reasons=self._run_info["failure_reasons"],
            )
        return None

    def report(self, print_output: bool = True) -> List[str]:
        """Summary lines, one per condition (printed unless *print_output* is False)."""
        processor = ResultsProcessor(cumulative=self.cumulative_report)
        lines = [_format_summary_line(s) for s in processor.summarize(self.store)]
        if print_output:
            for line in lines:
                print(line, flush=True)
        return lines

    def summary_frame(self) -> pd.DataFrame:
        return ResultsProcessor(cumulative=self.cumulative_report).summary_frame(self.store)

    def results_frame(self) -> pd.DataFrame:
        return self.store.to_frame()

    def plot(self, title: str = "Supervised vs. semi-supervised validity", show: bool = True):
        """Plot per-condition means with SD error bars (requires matplotlib)."""
        return _create_validity_plot(self.summary_frame(), title, show=show)

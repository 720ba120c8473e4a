"""
Results storage and summary processing for SSValidity.

``ResultsStore`` is the only state shared across replications: one
``ReplicationResult`` per (condition, replication) key, inserted at most
once. Conditions are keyed by ``(pop_validity, nl, nu)``; the label is
carried along for display. ``ResultsProcessor`` turns the store into
per-condition summaries.
"""

from dataclasses import asdict, dataclass
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..errors import DuplicateResultError
from ..stats.descriptives import mean, std_dev
from ..utils.formatters import _format_summary_line
from .conditions import ConditionKey, SimulationCondition

ConditionRef = Union[SimulationCondition, ConditionKey]


def _key_of(condition: ConditionRef) -> ConditionKey:
    if isinstance(condition, SimulationCondition):
        return condition.key
    pop_validity, nl, nu = condition
    return (float(pop_validity), nl, nu)


@dataclass(frozen=True)
class ReplicationResult:
    """Validity estimates from one replication.

    Attributes:
        condition: Condition label (``"rho=0.40,NL=100,NU=200"``).
        pop_validity: Population validity of the condition.
        nl: Labeled sample size.
        nu: Unlabeled sample size.
        replication: 1-based replication index.
        r_sup: Correlation over labeled cases only.
        r_semi: Correlation over labeled and imputed cases.
    """

    condition: str
    pop_validity: float
    nl: int
    nu: int
    replication: int
    r_sup: float
    r_semi: float

    @property
    def key(self) -> ConditionKey:
        return (float(self.pop_validity), self.nl, self.nu)


class ResultsStore:
    """Condition- and replication-indexed store with at-most-once insertion.

    Conditions iterate in first-insertion order; replications within a
    condition in insertion order. Lookups accept a ``SimulationCondition``
    or its ``(pop_validity, nl, nu)`` key.
    """

    def __init__(self):
        self._results: Dict[ConditionKey, Dict[int, ReplicationResult]] = {}

    def add(self, result: ReplicationResult) -> None:
        """Record *result*.

        Raises:
            DuplicateResultError: If the (condition, replication) key exists.
        """
        reps = self._results.setdefault(result.key, {})
        if result.replication in reps:
            raise DuplicateResultError(f"result for {result.condition}:{result.replication} already recorded")
        reps[result.replication] = result

    def record(self, condition: SimulationCondition, replication: int, r_sup: float, r_semi: float) -> ReplicationResult:
        result = ReplicationResult(
            condition=condition.label,
            pop_validity=float(condition.pop_validity),
            nl=condition.nl,
            nu=condition.nu,
            replication=replication,
            r_sup=r_sup,
            r_semi=r_semi,
        )
        self.add(result)
        return result

    def __contains__(self, key: Tuple[ConditionRef, int]) -> bool:
        condition, replication = key
        return replication in self._results.get(_key_of(condition), {})

    def __getitem__(self, key: Tuple[ConditionRef, int]) -> ReplicationResult:
        condition, replication = key
        return self._results[_key_of(condition)][replication]

    def __len__(self) -> int:
        return sum(len(reps) for reps in self._results.values())

    def __iter__(self) -> Iterator[ReplicationResult]:
        for reps in self._results.values():
            yield from reps.values()

    def conditions(self) -> List[ConditionKey]:
        return list(self._results)

    def results_for(self, condition: ConditionRef) -> List[ReplicationResult]:
        return list(self._results.get(_key_of(condition), {}).values())

    def to_frame(self) -> pd.DataFrame:
        """All results as a DataFrame, one row per replication."""
        columns = list(ReplicationResult.__dataclass_fields__)
        return pd.DataFrame([asdict(r) for r in self], columns=columns)


@dataclass(frozen=True)
class ConditionSummary:
    """Mean and SD of both estimates across a condition's replications."""

    condition: str
    n_replications: int
    sup_mean: float
    sup_sd: float
    semi_mean: float
    semi_sd: float

    def format(self) -> str:
        return _format_summary_line(self)


def _sd_or_nan(values: List[float]) -> float:
    return std_dev(values) if len(values) >= 2 else float("nan")


class ResultsProcessor:
    """Summarises a ``ResultsStore`` per condition.

    By default each condition is summarised over its own replications.
    With ``cumulative=True`` the value lists keep growing from one condition
    to the next, so the summary for the k-th condition covers conditions
    1..k; this reproduces the historical report layout and is kept for
    comparison with older output.
    """

    def __init__(self, cumulative: bool = False):
        """Initialise the results processor.

        Args:
            cumulative: Accumulate replications across conditions in
                report order instead of resetting per condition.
        """
        self.cumulative = cumulative

    def summarize(self, store: ResultsStore) -> List[ConditionSummary]:
        summaries = []
        r_sup: List[float] = []
        r_semi: List[float] = []

        for key in store.conditions():
            results = store.results_for(key)
            if not results:
                continue
            if not self.cumulative:
                r_sup, r_semi = [], []
            r_sup.extend(r.r_sup for r in results)
            r_semi.extend(r.r_semi for r in results)

            summaries.append(
                ConditionSummary(
                    condition=results[0].condition,
                    n_replications=len(results),
                    sup_mean=mean(r_sup),
                    sup_sd=_sd_or_nan(r_sup),
                    semi_mean=mean(r_semi),
                    semi_sd=_sd_or_nan(r_semi),
                )
            )
        return summaries

    def summary_frame(self, store: ResultsStore) -> pd.DataFrame:
        """Summaries as a DataFrame, plus the mean semi-minus-supervised difference."""
        rows = [asdict(s) for s in self.summarize(store)]
        columns = list(ConditionSummary.__dataclass_fields__)
        frame = pd.DataFrame(rows, columns=columns)
        frame["mean_difference"] = frame["semi_mean"] - frame["sup_mean"]
        return frame

    def format_report(self, store: ResultsStore) -> List[str]:
        return [s.format() for s in self.summarize(store)]


def build_run_result(
    store: ResultsStore,
    summaries: List[ConditionSummary],
    n_failed: int = 0,
    failure_reasons: Optional[Dict[str, int]] = None,
) -> Dict:
    """Package a finished run for ``ValidityStudy.run(return_results=True)``."""
    return {
        "store": store,
        "summaries": summaries,
        "n_replications_used": len(store),
        "n_replications_failed": n_failed,
        "failure_reasons": dict(failure_reasons or {}),
        "max_abs_difference": float(np.nanmax([abs(s.semi_mean - s.sup_mean) for s in summaries])) if summaries else float("nan"),
    }

"""Unit tests for ssvalidity.core.results — ResultsStore and ResultsProcessor."""

import math

import numpy as np
import pytest

from ssvalidity.core import SimulationCondition
from ssvalidity.core.results import (
    ConditionSummary,
    ReplicationResult,
    ResultsProcessor,
    ResultsStore,
    build_run_result,
)
from ssvalidity.errors import DuplicateResultError

A = SimulationCondition(0.4, nl=100, nu=200)
B = SimulationCondition(0.2, nl=50, nu=0)
C = SimulationCondition(0.6, nl=20, nu=20)


def _store(values):
    """Build a store from ``{condition: [(r_sup, r_semi), ...]}``."""
    store = ResultsStore()
    for condition, pairs in values.items():
        for rep, (r_sup, r_semi) in enumerate(pairs, start=1):
            store.record(condition, rep, r_sup, r_semi)
    return store


class TestResultsStore:
    """Tests for at-most-once insertion and ordering."""

    def test_record_and_lookup(self):
        store = ResultsStore()
        result = store.record(A, 1, 0.3, 0.35)
        assert result.condition == "rho=0.40,NL=100,NU=200"
        assert result.key == (0.4, 100, 200)
        assert store[A, 1] == result
        assert (A, 1) in store
        assert ((0.4, 100, 200), 1) in store
        assert (A, 2) not in store
        assert len(store) == 1

    def test_duplicate_rejected(self):
        store = ResultsStore()
        store.add(ReplicationResult("A", 0.4, 100, 200, 1, 0.3, 0.3))
        with pytest.raises(DuplicateResultError):
            store.add(ReplicationResult("A", 0.4, 100, 200, 1, 0.5, 0.5))
        # original kept
        assert store[A, 1].r_sup == 0.3

    def test_duplicate_is_key_error(self):
        assert issubclass(DuplicateResultError, KeyError)

    def test_conditions_keyed_by_parameters_not_label(self):
        # same two-decimal rounding, different conditions
        low = SimulationCondition(0.401, nl=30, nu=20)
        high = SimulationCondition(0.404, nl=30, nu=20)
        store = ResultsStore()
        store.record(low, 1, 0.1, 0.1)
        store.record(high, 1, 0.2, 0.2)
        assert store.conditions() == [low.key, high.key]
        assert store[high, 1].r_sup == 0.2

    def test_int_and_float_validity_share_a_key(self):
        store = ResultsStore()
        store.record(SimulationCondition(0, nl=30, nu=20), 1, 0.1, 0.1)
        assert ((0.0, 30, 20), 1) in store

    def test_condition_order_is_insertion_order(self):
        store = _store({B: [(0.1, 0.1)], A: [(0.2, 0.2)], C: [(0.3, 0.3)]})
        assert store.conditions() == [B.key, A.key, C.key]

    def test_results_for(self):
        store = _store({A: [(0.1, 0.2), (0.3, 0.4)]})
        assert [r.replication for r in store.results_for(A)] == [1, 2]
        assert store.results_for(B) == []

    def test_to_frame(self):
        frame = _store({A: [(0.1, 0.2)], B: [(0.3, 0.4)]}).to_frame()
        assert list(frame.columns) == ["condition", "pop_validity", "nl", "nu", "replication", "r_sup", "r_semi"]
        assert frame["condition"].tolist() == [A.label, B.label]
        assert frame["nu"].tolist() == [200, 0]
        assert frame["r_semi"].tolist() == [0.2, 0.4]

    def test_empty_frame(self):
        frame = ResultsStore().to_frame()
        assert frame.empty
        assert "r_sup" in frame.columns


class TestResultsProcessor:
    """Tests for per-condition and cumulative summaries."""

    def test_per_condition_summary(self):
        store = _store({A: [(0.2, 0.3), (0.4, 0.5)], B: [(0.6, 0.6), (0.8, 1.0)]})
        summaries = ResultsProcessor().summarize(store)

        assert [s.condition for s in summaries] == [A.label, B.label]
        a, b = summaries
        assert a.n_replications == 2
        assert a.sup_mean == pytest.approx(0.3)
        assert a.semi_mean == pytest.approx(0.4)
        assert a.sup_sd == pytest.approx(np.std([0.2, 0.4], ddof=1))
        assert b.sup_mean == pytest.approx(0.7)
        assert b.semi_sd == pytest.approx(np.std([0.6, 1.0], ddof=1))

    def test_cumulative_summary(self):
        store = _store({A: [(0.2, 0.3), (0.4, 0.5)], B: [(0.6, 0.6), (0.8, 1.0)]})
        a, b = ResultsProcessor(cumulative=True).summarize(store)

        assert a.sup_mean == pytest.approx(0.3)
        # second condition covers the first as well
        assert b.sup_mean == pytest.approx(np.mean([0.2, 0.4, 0.6, 0.8]))
        assert b.semi_sd == pytest.approx(np.std([0.3, 0.5, 0.6, 1.0], ddof=1))
        # the reported count stays per condition
        assert b.n_replications == 2

    def test_single_replication_sd_is_nan(self):
        (summary,) = ResultsProcessor().summarize(_store({A: [(0.2, 0.3)]}))
        assert summary.sup_mean == pytest.approx(0.2)
        assert math.isnan(summary.sup_sd)
        assert math.isnan(summary.semi_sd)

    def test_summary_frame(self):
        store = _store({A: [(0.2, 0.3), (0.4, 0.5)]})
        frame = ResultsProcessor().summary_frame(store)
        assert frame.loc[0, "condition"] == A.label
        assert frame.loc[0, "mean_difference"] == pytest.approx(0.1)

    def test_format_report(self):
        store = _store({A: [(0.25, 0.27), (0.35, 0.33)]})
        (line,) = ResultsProcessor().format_report(store)
        assert line.startswith("cond=rho=0.40,NL=100,NU=200, reps=2, sup_r_mn=0.300, sup_r_sd=0.071")
        assert line.endswith("semi_r_mn=0.300, semi_r_sd=0.042")

    def test_empty_store(self):
        assert ResultsProcessor().summarize(ResultsStore()) == []


class TestBuildRunResult:
    def test_keys(self):
        store = _store({A: [(0.2, 0.3), (0.4, 0.5)]})
        summaries = ResultsProcessor().summarize(store)
        out = build_run_result(store, summaries, n_failed=1, failure_reasons={"DegenerateDataError: x": 1})
        assert out["n_replications_used"] == 2
        assert out["n_replications_failed"] == 1
        assert out["failure_reasons"] == {"DegenerateDataError: x": 1}
        assert out["max_abs_difference"] == pytest.approx(0.1)
        assert isinstance(out["summaries"][0], ConditionSummary)

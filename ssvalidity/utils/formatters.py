"""
Text formatting for run output.

Line layouts are fixed: downstream scripts parse the progress and summary
lines.
"""

from typing import Any

__all__ = []


def _format_progress_line(condition: str, replication: int, r_sup: float, r_semi: float) -> str:
    """``"{condition}:{rep}: supervised r = 0.123, semi-supervised r = 0.456"``."""
    return f"{condition}:{replication}: supervised r = {r_sup:.3f}, semi-supervised r = {r_semi:.3f}"


def _format_summary_line(summary: Any) -> str:
    """One report line for a ``ConditionSummary``."""
    return (
        f"cond={summary.condition}, reps={summary.n_replications:d}, "
        f"sup_r_mn={summary.sup_mean:.3f}, sup_r_sd={summary.sup_sd:.3f}, "
        f"semi_r_mn={summary.semi_mean:.3f}, semi_r_sd={summary.semi_sd:.3f}"
    )


def _format_condition_options(condition: Any, replication: Any = None) -> str:
    """Multi-line description of a ``SimulationCondition``."""
    lines = [
        "Simulation Options",
        "------------------",
        "",
        f"number labeled        : {condition.nl}",
        f"number unlabeled      : {condition.nu}",
        f"population validity   : {condition.pop_validity}",
        f"criterion reliability : {condition.crit_rel}",
        f"predictor reliability : {condition.test_rel}",
        f"predictor mean        : {condition.test_mn:g}",
        f"predictor SD          : {condition.test_sd:g}",
        f"minimum donors        : {condition.nmatch}",
    ]
    if replication is not None:
        lines.append(f"replications          : {replication}")
    lines.append("")
    return "\n".join(lines)

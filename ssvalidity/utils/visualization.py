"""
Visualization utilities for SSValidity.

This module provides plotting functions for per-condition summaries.
"""

import numpy as np

__all__ = []


def _create_validity_plot(summary, title: str, show: bool = True):
    """Plot supervised vs. semi-supervised mean validity per condition.

    Draws one point pair per condition with +/- 1 SD error bars.

    Args:
        summary: DataFrame from ``ResultsProcessor.summary_frame``.
        title: Plot title.
        show: Call ``plt.show()``; pass ``False`` to get the figure back
            untouched (e.g. for saving).

    Returns:
        The matplotlib ``Figure``.

    Raises:
        ImportError: If ``matplotlib`` is not installed.
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib required for plotting: pip install matplotlib") from None

    n = len(summary)
    positions = np.arange(n)
    offset = 0.15

    fig, ax = plt.subplots(figsize=(max(8, 0.5 * n + 4), 6))
    colors = plt.get_cmap("Set1")(np.linspace(0, 1, 9))

    ax.errorbar(
        positions - offset,
        summary["sup_mean"],
        yerr=summary["sup_sd"].fillna(0.0),
        fmt="o",
        color=colors[1],
        label="supervised",
        markersize=5,
        capsize=3,
    )
    ax.errorbar(
        positions + offset,
        summary["semi_mean"],
        yerr=summary["semi_sd"].fillna(0.0),
        fmt="s",
        color=colors[0],
        label="semi-supervised",
        markersize=5,
        capsize=3,
    )

    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.set_xlabel("Condition", fontsize=12)
    ax.set_ylabel("Validity coefficient (r)", fontsize=12)
    ax.set_xticks(positions)
    ax.set_xticklabels(summary["condition"], rotation=60, ha="right", fontsize=8)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="upper left")
    ax.set_ylim(-1.05, 1.05)

    plt.tight_layout()
    if show:
        plt.show()
    return fig

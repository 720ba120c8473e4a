"""
Progress reporting for SSValidity runs.

A run walks the condition grid one condition at a time. Progress is
delivered as a ``ProgressUpdate`` snapshot: which condition is running
(k of N, with its label), how far that condition has got, and how far the
whole run has got. Any callable taking a single ``ProgressUpdate`` can be
passed as ``progress_callback``.
"""

import sys
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, TextIO


@dataclass(frozen=True)
class ProgressUpdate:
    """Snapshot of a run.

    Attributes:
        condition: Label of the running condition (``""`` before the first).
        condition_index: 1-based position of that condition in the grid.
        n_conditions: Number of conditions in the run.
        replications_done: Replications finished in the running condition.
        replications: Replications per condition.
        completed: Replications finished across the whole run.
        total: Replications in the whole run.
        finished: ``True`` on the last update of a run, complete or not.
    """

    condition: str
    condition_index: int
    n_conditions: int
    replications_done: int
    replications: int
    completed: int
    total: int
    finished: bool = False

    @property
    def fraction(self) -> float:
        return self.completed / self.total if self.total else 1.0


class ProgressReporter:
    """Counts replications per condition and feeds a callback.

    The callback fires when a condition begins, every *update_every*
    replications within it, when it ends, and once more from ``close()``.

    Args:
        conditions: Condition labels in run order.
        replications: Replications per condition.
        callback: Called with a ``ProgressUpdate``.
        update_every: Replications between updates inside a condition.
            Defaults to ``max(1, replications // 20)``.
    """

    def __init__(
        self,
        conditions: Sequence[str],
        replications: int,
        callback: Callable[[ProgressUpdate], None],
        update_every: Optional[int] = None,
    ):
        self.conditions = list(conditions)
        self.replications = replications
        self.total = len(self.conditions) * replications
        self.update_every = update_every if update_every is not None else max(1, replications // 20)
        self._callback = callback
        self._index = 0
        self._done = 0
        self._completed = 0
        self._closed = False

    @property
    def completed(self) -> int:
        return self._completed

    def snapshot(self, finished: bool = False) -> ProgressUpdate:
        label = self.conditions[self._index - 1] if self._index else ""
        return ProgressUpdate(
            condition=label,
            condition_index=self._index,
            n_conditions=len(self.conditions),
            replications_done=self._done,
            replications=self.replications,
            completed=self._completed,
            total=self.total,
            finished=finished,
        )

    def begin_condition(self, index: int):
        """Mark the condition at grid position *index* (0-based) as running."""
        self._index = index + 1
        self._done = 0
        self._callback(self.snapshot())

    def advance(self, n: int = 1):
        """Count *n* finished replications of the running condition."""
        self._done += n
        self._completed += n
        if self._done >= self.replications or self._done % self.update_every == 0:
            self._callback(self.snapshot())

    def close(self):
        """Send the final update; safe to call more than once."""
        if not self._closed:
            self._closed = True
            self._callback(self.snapshot(finished=True))


class PrintReporter:
    """Single-line console progress on stderr.

    Renders ``[3/12] rho=0.40,NL=100,NU=200  120/500 reps | 44.0% of run``,
    rewriting the line in place and ending it when the run stops.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream
        self._width = 0

    def __call__(self, update: ProgressUpdate):
        stream = self.stream if self.stream is not None else sys.stderr
        if update.total <= 0:
            return
        line = (
            f"[{update.condition_index}/{update.n_conditions}] {update.condition}  "
            f"{update.replications_done}/{update.replications} reps | {100.0 * update.fraction:.1f}% of run"
        )
        self._width = max(self._width, len(line))
        stream.write("\r" + line.ljust(self._width))
        if update.finished:
            stream.write("\n")
            self._width = 0
        stream.flush()


class TqdmReporter:
    """tqdm bar over all replications, described by the running condition (lazy import).

    Usage::

        from ssvalidity.progress import TqdmReporter
        study.run(progress_callback=TqdmReporter())
    """

    def __init__(self, **tqdm_kwargs):
        self._tqdm_kwargs = tqdm_kwargs
        self._bar = None

    def __call__(self, update: ProgressUpdate):
        from tqdm import tqdm

        if self._bar is None:
            if update.finished:
                return
            self._bar = tqdm(total=update.total, unit="rep", **self._tqdm_kwargs)

        if update.condition:
            self._bar.set_description(f"[{update.condition_index}/{update.n_conditions}] {update.condition}", refresh=False)
        delta = update.completed - self._bar.n
        if delta > 0:
            self._bar.update(delta)
        else:
            self._bar.refresh()

        if update.finished:
            self._bar.close()
            self._bar = None

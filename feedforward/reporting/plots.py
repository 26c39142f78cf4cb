"""Headless-safe plotting of the training curve."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from ..core.types import IterationStatistic


class PlotAdapter:
    """Collect scores and, on ``close``, write ``loss.png`` with matplotlib."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    @property
    def plot_path(self) -> Path:
        return self.run_dir / "loss.png"

    def update(self, statistic: IterationStatistic) -> None:
        if not self.enable_plots:
            return
        self._history.append((statistic.iteration, statistic.score))

    def close(self) -> None:
        if not self.enable_plots or not self._history:
            return
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        iterations, scores = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(iterations, scores)
        ax.set_xlabel("Iteration")
        ax.set_ylabel("Mean square error")
        ax.set_title("Training Curve")
        fig.savefig(self.plot_path)
        plt.close(fig)

    __call__ = update

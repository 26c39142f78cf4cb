"""Metric sinks that persist training progress."""

from __future__ import annotations

import csv
import json
from pathlib import Path

from ..core.types import IterationStatistic


class JsonlSink:
    """Append one JSON record per statistic to ``path``."""

    def __init__(self, path: str | Path, *, seed: int | None = None) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.seed = seed

    def update(self, statistic: IterationStatistic) -> None:
        record = {
            "iteration": int(statistic.iteration),
            "score": float(statistic.score),
            "seed": self.seed,
        }
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = update


class CsvSink:
    """Write ``iteration,score`` rows with a header."""

    fieldnames = ("iteration", "score")

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def update(self, statistic: IterationStatistic) -> None:
        row = {"iteration": int(statistic.iteration), "score": float(statistic.score)}
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self.fieldnames)
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)

    __call__ = update


__all__ = ["CsvSink", "JsonlSink"]

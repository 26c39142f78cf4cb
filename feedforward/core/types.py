"""Core typing contracts for feedforward."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Sequence, Tuple

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class Sample:
    """A single labelled training example.

    ``input`` and ``output`` are stored as tuples of floats so a sample cannot
    be mutated once loaded.
    """

    input: Tuple[float, ...]
    output: Tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "input", tuple(float(v) for v in self.input))
        object.__setattr__(self, "output", tuple(float(v) for v in self.output))

    @classmethod
    def of(cls, inputs: Sequence[float], outputs: Sequence[float]) -> "Sample":
        return cls(tuple(inputs), tuple(outputs))


@dataclass
class IterationStatistic:
    """Progress report for one epoch of an iterative algorithm.

    ``score`` is a loss value (lower is better).  It is expensive to compute,
    so it is evaluated on first access through ``scorer`` and cached on the
    instance; later reads never call ``scorer`` again.
    """

    iteration: int
    scorer: Callable[[], float] = field(repr=False)
    _score: float | None = field(default=None, init=False, repr=False)

    @classmethod
    def with_score(cls, iteration: int, score: float) -> "IterationStatistic":
        statistic = cls(iteration, lambda: score)
        statistic._score = float(score)
        return statistic

    @property
    def has_score(self) -> bool:
        return self._score is not None

    @property
    def score(self) -> float:
        if self._score is None:
            self._score = float(self.scorer())
        return self._score


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`feedforward.training.pipelines.run_pipeline`."""

    iterations: int
    score: float
    predictions: List[List[float]] = field(default_factory=list)

"""Composable stopping conditions for iterative training."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..core.exceptions import ConfigurationError
from ..core.types import IterationStatistic

Predicate = Callable[[IterationStatistic], bool]


@dataclass(frozen=True)
class StoppingCondition:
    """Predicate over an :class:`IterationStatistic`.

    Conditions compose into new conditions without modifying the originals.
    ``or_`` and ``and_`` short-circuit left to right, so placing a cheap
    condition first avoids evaluating an expensive score when it decides the
    result on its own.
    """

    is_met: Predicate
    description: str = "condition"

    def __call__(self, statistic: IterationStatistic) -> bool:
        return bool(self.is_met(statistic))

    def __str__(self) -> str:
        return self.description

    def and_(self, other: "StoppingCondition") -> "StoppingCondition":
        return StoppingCondition(
            lambda statistic: self(statistic) and other(statistic),
            f"({self} and {other})",
        )

    def or_(self, other: "StoppingCondition") -> "StoppingCondition":
        return StoppingCondition(
            lambda statistic: self(statistic) or other(statistic),
            f"({self} or {other})",
        )

    def not_(self) -> "StoppingCondition":
        return StoppingCondition(lambda statistic: not self(statistic), f"not {self}")

    __and__ = and_
    __or__ = or_
    __invert__ = not_


def max_iter(n: int) -> StoppingCondition:
    """Met once the iteration count reaches ``n``."""

    if n < 0:
        raise ConfigurationError(f"max_iter must be non-negative, got {n}")
    return StoppingCondition(lambda statistic: statistic.iteration >= n, f"max_iter({n})")


def precision(p: float) -> StoppingCondition:
    """Met once the score drops to ``p`` or below; forces score evaluation."""

    return StoppingCondition(lambda statistic: statistic.score <= p, f"precision({p})")


__all__ = ["StoppingCondition", "max_iter", "precision"]

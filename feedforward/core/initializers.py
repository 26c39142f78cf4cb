"""Weight initialisation strategies.

Initializers fill a weight matrix of shape ``(fan_in, fan_out)`` in place and
never touch biases.  The random source is passed in explicitly by the caller
(the network threads one seeded generator per training run); when it is
omitted the initializer falls back to its own generator, seeded once at
construction from ``seed``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Protocol

import numpy as np

from .exceptions import ConfigurationError
from .types import Array


class Initializer(Protocol):
    """Protocol implemented by weight initializers."""

    def initialize(self, weights: Array, rng: np.random.Generator | None = None) -> None:
        """Overwrite every entry of ``weights`` in place."""


@dataclass
class _Seeded:
    seed: int | None = field(default=None, kw_only=True)
    _rng: np.random.Generator = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._rng = np.random.default_rng(self.seed)

    def _source(self, rng: np.random.Generator | None) -> np.random.Generator:
        return self._rng if rng is None else rng


@dataclass
class Uniform(_Seeded):
    """Draw every weight independently from ``[lb, ub)``."""

    lb: float = -1.0
    ub: float = 1.0

    def __post_init__(self) -> None:
        if self.lb > self.ub:
            raise ConfigurationError(f"Uniform bounds are reversed: lb={self.lb} > ub={self.ub}")
        super().__post_init__()

    def initialize(self, weights: Array, rng: np.random.Generator | None = None) -> None:
        weights[...] = self._source(rng).uniform(self.lb, self.ub, size=weights.shape)


@dataclass
class Gaussian(_Seeded):
    """Draw every weight independently from ``N(mean, stddev**2)``."""

    mean: float = 0.0
    stddev: float = 1.0

    def __post_init__(self) -> None:
        if self.stddev < 0:
            raise ConfigurationError(f"Gaussian stddev must be non-negative, got {self.stddev}")
        super().__post_init__()

    def initialize(self, weights: Array, rng: np.random.Generator | None = None) -> None:
        weights[...] = self._source(rng).normal(self.mean, self.stddev, size=weights.shape)


@dataclass
class Xavier(_Seeded):
    """Glorot uniform initialisation.

    ``mean`` and ``stddev`` are accepted for signature parity with
    :class:`Gaussian` but ignored: the bound depends only on the matrix shape,
    ``sqrt(6 / (fan_in + fan_out))``.
    """

    mean: float = 0.0
    stddev: float = 1.0

    @staticmethod
    def bound(fan_in: int, fan_out: int) -> float:
        return math.sqrt(6.0 / (fan_in + fan_out))

    def initialize(self, weights: Array, rng: np.random.Generator | None = None) -> None:
        fan_in, fan_out = weights.shape
        limit = self.bound(fan_in, fan_out)
        weights[...] = self._source(rng).uniform(-limit, limit, size=weights.shape)


_REGISTRY: Dict[str, Callable[..., Initializer]] = {
    "uniform": Uniform,
    "gaussian": Gaussian,
    "normal": Gaussian,
    "xavier": Xavier,
    "glorot": Xavier,
}


def get_initializer(name: str, **params: Any) -> Initializer:
    """Build the initializer registered under ``name`` with ``params``."""

    try:
        factory = _REGISTRY[name.lower()]
    except KeyError:
        available = ", ".join(sorted(_REGISTRY))
        raise ConfigurationError(
            f"Unknown initializer {name!r}. Available initializers: {available}"
        ) from None
    try:
        return factory(**params)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid parameters for initializer {name!r}: {exc}") from exc


def available_initializers() -> List[str]:
    return sorted(_REGISTRY)


__all__ = [
    "Gaussian",
    "Initializer",
    "Uniform",
    "Xavier",
    "available_initializers",
    "get_initializer",
]

"""Activation functions for feedforward layers.

Every activation carries its gradient expressed in terms of the *activated*
output ``a`` rather than the net input, e.g. the sigmoid gradient is
``a * (1 - a)``.  The backward pass calls ``gradient`` with the cached layer
output, so a custom activation must supply its gradient in the same form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

import numpy as np

from .exceptions import ConfigurationError
from .types import Array

ScalarFn = Callable[[Array], Array]


@dataclass(frozen=True)
class ActivationFunction:
    """Pair of element-wise functions ``(value, gradient)``.

    Instances are stateless and shared by every neuron of a layer.
    """

    name: str
    value: ScalarFn
    gradient: ScalarFn


def _sigmoid(x: Array) -> Array:
    return 1.0 / (1.0 + np.exp(-x))


def _sigmoid_grad(a: Array) -> Array:
    return a * (1.0 - a)


def _tanh_grad(a: Array) -> Array:
    return 1.0 - np.square(a)


def _relu(x: Array) -> Array:
    return np.maximum(x, 0.0)


def _relu_grad(a: Array) -> Array:
    # Non-differentiable at zero; the gradient there is taken to be 0.
    return np.where(a > 0.0, 1.0, 0.0)


def _identity(x: Array) -> Array:
    return np.asarray(x, dtype=np.float64)


def _identity_grad(a: Array) -> Array:
    return np.ones_like(a, dtype=np.float64)


def sigmoid() -> ActivationFunction:
    """Logistic sigmoid, range ``(0, 1)``."""

    return SIGMOID


def tanh() -> ActivationFunction:
    """Hyperbolic tangent, range ``(-1, 1)``."""

    return TANH


def relu() -> ActivationFunction:
    """Rectified linear unit, range ``[0, inf)``; gradient 0 at zero."""

    return RELU


def identity() -> ActivationFunction:
    return IDENTITY


SIGMOID = ActivationFunction("sigmoid", _sigmoid, _sigmoid_grad)
TANH = ActivationFunction("tanh", np.tanh, _tanh_grad)
RELU = ActivationFunction("relu", _relu, _relu_grad)
IDENTITY = ActivationFunction("identity", _identity, _identity_grad)

_REGISTRY: Dict[str, ActivationFunction] = {
    fn.name: fn for fn in (SIGMOID, TANH, RELU, IDENTITY)
}
_REGISTRY["linear"] = IDENTITY
_REGISTRY["logistic"] = SIGMOID


def register_activation(activation: ActivationFunction) -> None:
    _REGISTRY[activation.name] = activation


def get_activation(name: str) -> ActivationFunction:
    try:
        return _REGISTRY[name.lower()]
    except KeyError:
        available = ", ".join(sorted(_REGISTRY))
        raise ConfigurationError(
            f"Unknown activation {name!r}. Available activations: {available}"
        ) from None


def available_activations() -> List[str]:
    return sorted(_REGISTRY)


def repeat(activation: ActivationFunction, n: int) -> List[ActivationFunction]:
    """Return ``n`` references to the same ``activation``."""

    return [activation] * n


__all__ = [
    "ActivationFunction",
    "available_activations",
    "get_activation",
    "identity",
    "register_activation",
    "relu",
    "repeat",
    "sigmoid",
    "tanh",
]

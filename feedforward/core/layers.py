"""Fully connected layers of a feed-forward network.

A layer owns one weight matrix of shape ``(fan_in, width)`` (column ``j``
holds the incoming weights of neuron ``j``), a bias vector and an
activation.  Hidden and output layers share the forward pass and differ only
in how they turn the downstream signal into their local error.
"""

from __future__ import annotations

import enum
from typing import List, Sequence

import numpy as np

from .activations import ActivationFunction
from .exceptions import ConfigurationError, ShapeMismatchError
from .initializers import Initializer
from .parallel import NeuronPool
from .types import Array


class LayerRole(enum.Enum):
    HIDDEN = "hidden"
    OUTPUT = "output"


def read_only_view(matrix: Array) -> Array:
    """Return a non-writeable view sharing memory with ``matrix``."""

    view = matrix.view()
    view.flags.writeable = False
    return view


class Layer:
    """A single layer with a cached forward output.

    Hidden layers additionally hold a read-only view of the following layer's
    weight matrix, used to project the downstream error back onto this
    layer's neurons.  Because the view shares memory with the owning array,
    it always observes the latest in-place updates.
    """

    def __init__(
        self,
        weights: Array,
        biases: Array,
        activation: ActivationFunction,
        role: LayerRole,
        next_weights: Array | None = None,
        pool: NeuronPool | None = None,
    ) -> None:
        if weights.ndim != 2 or biases.ndim != 1:
            raise ConfigurationError("weights must be 2-D and biases 1-D")
        fan_in, width = weights.shape
        if width == 0 or biases.shape[0] == 0:
            raise ConfigurationError("a layer must have at least one neuron")
        if fan_in == 0:
            raise ConfigurationError("a layer must have at least one input")
        if biases.shape[0] != width:
            raise ConfigurationError(
                f"bias vector has {biases.shape[0]} entries, expected {width}"
            )
        if role is LayerRole.HIDDEN:
            if next_weights is None:
                raise ConfigurationError("a hidden layer requires the next layer's weights")
            if next_weights.ndim != 2 or next_weights.shape[0] != width:
                raise ConfigurationError(
                    f"next layer weights have shape {next_weights.shape}, "
                    f"expected {width} rows"
                )
            next_weights = read_only_view(next_weights)
        elif next_weights is not None:
            raise ConfigurationError("an output layer has no next layer")

        self.weights = weights
        self.biases = biases
        self.activation = activation
        self.role = role
        self.next_weights = next_weights
        self.pool = pool or NeuronPool()
        self._output_cache: Array | None = None

    @classmethod
    def hidden(
        cls,
        weights: Array,
        biases: Array,
        next_weights: Array,
        activation: ActivationFunction,
        pool: NeuronPool | None = None,
    ) -> "Layer":
        return cls(weights, biases, activation, LayerRole.HIDDEN, next_weights, pool)

    @classmethod
    def output(
        cls,
        weights: Array,
        biases: Array,
        activation: ActivationFunction,
        pool: NeuronPool | None = None,
    ) -> "Layer":
        return cls(weights, biases, activation, LayerRole.OUTPUT, None, pool)

    def __repr__(self) -> str:
        return (
            f"<Layer role={self.role.value} fan_in={self.fan_in} width={self.width} "
            f"activation={self.activation.name}>"
        )

    @property
    def fan_in(self) -> int:
        return int(self.weights.shape[0])

    @property
    def width(self) -> int:
        return int(self.weights.shape[1])

    def initialize(self, initializer: Initializer, rng: np.random.Generator | None = None) -> None:
        """Fill the weights with ``initializer`` and zero the biases."""

        initializer.initialize(self.weights, rng)
        self.biases[...] = 0.0
        self._output_cache = None

    def process_input(self, inputs: Array) -> Array:
        """Compute, cache and return this layer's output for ``inputs``."""

        inputs = np.asarray(inputs, dtype=np.float64)
        if inputs.shape != (self.fan_in,):
            raise ShapeMismatchError(
                f"layer expects {self.fan_in} inputs, got shape {inputs.shape}"
            )
        output = np.empty(self.width, dtype=np.float64)

        def _neurons(lo: int, hi: int) -> None:
            net = self.biases[lo:hi] + inputs @ self.weights[:, lo:hi]
            output[lo:hi] = self.activation.value(net)

        self.pool.run_slices(self.width, _neurons)
        self._output_cache = output
        return output

    @property
    def output_cache(self) -> Array | None:
        return self._output_cache

    def get_output_cache(self) -> Array:
        if self._output_cache is None:
            raise RuntimeError("layer output requested before any forward pass")
        return self._output_cache

    def process_error(self, signal: Array) -> Array:
        """Return this layer's error (delta) for the downstream ``signal``.

        For the output layer ``signal`` is ``expected - actual``.  For a
        hidden layer it is the next layer's delta, projected back through the
        next layer's weights before scaling by the local gradient.
        """

        output = self.get_output_cache()
        layer_error = np.empty(self.width, dtype=np.float64)

        if self.role is LayerRole.OUTPUT:

            def _neurons(lo: int, hi: int) -> None:
                layer_error[lo:hi] = self.activation.gradient(output[lo:hi]) * signal[lo:hi]

        else:
            next_weights = self.next_weights

            def _neurons(lo: int, hi: int) -> None:
                projected = next_weights[lo:hi] @ signal
                layer_error[lo:hi] = self.activation.gradient(output[lo:hi]) * projected

        self.pool.run_slices(self.width, _neurons)
        return layer_error

    def update(self, weight_step: Array, bias_step: Array) -> None:
        """Add the given steps to the parameters in place."""

        self.weights += weight_step
        self.biases += bias_step
        self._output_cache = None


def construct_weights(neurons: Sequence[int]) -> List[Array]:
    return [
        np.zeros((fan_in, width), dtype=np.float64)
        for fan_in, width in zip(neurons[:-1], neurons[1:])
    ]


def construct_biases(neurons: Sequence[int]) -> List[Array]:
    return [np.zeros(width, dtype=np.float64) for width in neurons[1:]]


def construct_layers(
    neurons: Sequence[int],
    activations: Sequence[ActivationFunction],
    pool: NeuronPool | None = None,
    weights: List[Array] | None = None,
    biases: List[Array] | None = None,
) -> List[Layer]:
    """Build ``len(neurons) - 1`` layers for the schedule ``neurons``.

    Every layer but the last is a hidden layer that views the weight matrix
    of its successor.  ``weights``/``biases`` may be supplied to build the
    layers over existing parameter storage.
    """

    if len(neurons) < 2:
        raise ConfigurationError(
            f"a network needs at least an input and an output width, got {list(neurons)}"
        )
    if any(isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 1 for n in neurons):
        raise ConfigurationError(f"layer widths must be positive integers, got {list(neurons)}")
    layer_count = len(neurons) - 1
    if len(activations) != layer_count:
        raise ConfigurationError(
            f"expected {layer_count} activations for schedule {list(neurons)}, "
            f"got {len(activations)}"
        )
    weights = construct_weights(neurons) if weights is None else weights
    biases = construct_biases(neurons) if biases is None else biases
    pool = pool or NeuronPool()

    layers: List[Layer] = []
    for k in range(layer_count - 1):
        layers.append(Layer.hidden(weights[k], biases[k], weights[k + 1], activations[k], pool))
    last = layer_count - 1
    layers.append(Layer.output(weights[last], biases[last], activations[last], pool))
    return layers


__all__ = [
    "Layer",
    "LayerRole",
    "construct_biases",
    "construct_layers",
    "construct_weights",
    "read_only_view",
]

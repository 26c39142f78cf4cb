"""Multilayer feed-forward network trained by online backpropagation."""

from __future__ import annotations

import enum
import logging
from typing import Callable, List, Protocol, Sequence, Tuple

import numpy as np

from ..core.activations import ActivationFunction, repeat
from ..core.exceptions import ConfigurationError, NotFittedError, ShapeMismatchError
from ..core.initializers import Initializer
from ..core.layers import Layer, construct_layers
from ..core.parallel import DEFAULT_PARALLEL_THRESHOLD, NeuronPool
from ..core.types import Array, IterationStatistic, Sample
from .losses import LossFunction, Predictor, mean_square_error
from .observers import Subject
from .stopping import StoppingCondition, max_iter

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITER = 1000


class Model(Protocol):
    """A model with a fit phase and a predict phase.

    ``fit`` must succeed before the first ``predict``; implementations raise
    :class:`NotFittedError` otherwise.
    """

    def fit(self, samples: Sequence[Sample]) -> "Model":
        ...

    def predict(self, inputs: Sequence[float]) -> Array:
        ...


class IterativeModel(Model, Protocol):
    """A model that can keep training without seeing every sample again."""

    def partial_fit(self, samples: Sequence[Sample]) -> "IterativeModel":
        ...


class NetworkState(enum.Enum):
    UNFITTED = "unfitted"
    FITTING = "fitting"
    FITTED = "fitted"


class Network(Subject):
    """Feed-forward network trained with per-sample stochastic gradient descent.

    Parameters
    ----------
    neurons:
        Width schedule ``[n0, n1, ..., nk]``; ``n0`` is the input width and
        ``nk`` the output width.  The network has ``k`` layers.
    activations:
        One activation per layer, or a single activation used by all of them.
    initializer:
        Fills every weight matrix at the start of :meth:`fit`.
    eta:
        Learning rate applied uniformly to every gradient.
    stopping_condition:
        Default condition evaluated once per epoch; ``fit`` may override it.
    loss:
        Scores the model for each :class:`IterationStatistic`.
    seed:
        Seeds the random source of each training run (initialisation and
        shuffling).  ``None`` draws fresh entropy per run.
    pool, parallel_threshold:
        Worker pool used for per-layer initialisation and per-neuron work in
        layers at least ``parallel_threshold`` neurons wide.
    """

    def __init__(
        self,
        neurons: Sequence[int],
        activations: ActivationFunction | Sequence[ActivationFunction],
        initializer: Initializer,
        eta: float,
        *,
        stopping_condition: StoppingCondition | None = None,
        loss: LossFunction = mean_square_error,
        seed: int | None = None,
        pool: NeuronPool | None = None,
        parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
    ) -> None:
        super().__init__()
        if not eta > 0:
            raise ConfigurationError(f"learning rate must be positive, got {eta}")
        neurons = list(neurons)
        if isinstance(activations, ActivationFunction):
            activations = repeat(activations, max(len(neurons) - 1, 0))
        self.pool = pool or NeuronPool(threshold=parallel_threshold)
        self._layers: List[Layer] = construct_layers(neurons, list(activations), self.pool)
        # The network owns the parameter arena; hidden layers only view it.
        self._weights: List[Array] = [layer.weights for layer in self._layers]
        self._biases: List[Array] = [layer.biases for layer in self._layers]
        self.neurons = [int(n) for n in neurons]
        self.activations = list(activations)
        self.initializer = initializer
        self.eta = float(eta)
        self.stopping_condition = stopping_condition or max_iter(DEFAULT_MAX_ITER)
        self.loss = loss
        self.seed = seed
        self.iterations = 0
        self._state = NetworkState.UNFITTED
        self._rng: np.random.Generator | None = None

    def __repr__(self) -> str:
        return f"<Network neurons={self.neurons} eta={self.eta} state={self._state.value}>"

    # ------------------------------------------------------------------
    # Public surface

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers)

    @property
    def state(self) -> NetworkState:
        return self._state

    @property
    def is_fitted(self) -> bool:
        return self._state is NetworkState.FITTED

    @property
    def input_width(self) -> int:
        return self.neurons[0]

    @property
    def output_width(self) -> int:
        return self.neurons[-1]

    def fit(
        self,
        samples: Sequence[Sample],
        stopping_condition: StoppingCondition | None = None,
    ) -> "Network":
        """Initialise every layer and train until the stopping condition holds."""

        inputs, targets = self._validate_samples(samples)
        condition = stopping_condition or self.stopping_condition
        logger.info(
            "fitting network %s with eta=%g on %d samples until %s",
            self.neurons,
            self.eta,
            len(samples),
            condition,
        )
        self._state = NetworkState.FITTING
        try:
            seeds = np.random.SeedSequence(self.seed).spawn(len(self._layers) + 1)
            layer_rngs = [np.random.default_rng(s) for s in seeds[:-1]]
            self._rng = np.random.default_rng(seeds[-1])
            self.pool.map(
                lambda pair: pair[0].initialize(self.initializer, pair[1]),
                list(zip(self._layers, layer_rngs)),
                inline=all(layer.width < self.pool.threshold for layer in self._layers),
            )
            self.iterations = self._backpropagation(samples, inputs, targets, condition)
        except Exception:
            self._state = NetworkState.UNFITTED
            raise
        self._state = NetworkState.FITTED
        logger.info("network fitted after %d iterations", self.iterations)
        return self

    def partial_fit(
        self,
        samples: Sequence[Sample],
        stopping_condition: StoppingCondition | None = None,
    ) -> "Network":
        """Keep training from the current parameters; ``fit`` if unfitted."""

        if not self.is_fitted or self._rng is None:
            return self.fit(samples, stopping_condition)
        inputs, targets = self._validate_samples(samples)
        condition = stopping_condition or self.stopping_condition
        self._state = NetworkState.FITTING
        try:
            self.iterations = self._backpropagation(samples, inputs, targets, condition)
        except Exception:
            self._state = NetworkState.UNFITTED
            raise
        self._state = NetworkState.FITTED
        return self

    def predict(self, inputs: Sequence[float]) -> Array:
        if not self.is_fitted:
            raise NotFittedError("predict called before the network was fitted")
        x = np.asarray(inputs, dtype=np.float64)
        if x.shape != (self.input_width,):
            raise ShapeMismatchError(
                f"network expects {self.input_width} inputs, got shape {x.shape}"
            )
        return self._forward(x).copy()

    def score(self, samples: Sequence[Sample]) -> float:
        if not self.is_fitted:
            raise NotFittedError("score called before the network was fitted")
        self._validate_samples(samples)
        return self.loss(self.predict, samples)

    def close(self) -> None:
        self.pool.close()

    def __enter__(self) -> "Network":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Training internals

    def _validate_samples(self, samples: Sequence[Sample]) -> Tuple[Array, Array]:
        if len(samples) == 0:
            raise ShapeMismatchError("at least one sample is required")
        for idx, sample in enumerate(samples):
            if len(sample.input) != self.input_width:
                raise ShapeMismatchError(
                    f"sample {idx} has {len(sample.input)} inputs, "
                    f"network expects {self.input_width}"
                )
            if len(sample.output) != self.output_width:
                raise ShapeMismatchError(
                    f"sample {idx} has {len(sample.output)} outputs, "
                    f"network produces {self.output_width}"
                )
        inputs = np.array([sample.input for sample in samples], dtype=np.float64)
        targets = np.array([sample.output for sample in samples], dtype=np.float64)
        return inputs, targets

    def _forward(self, x: Array) -> Array:
        output = x
        for layer in self._layers:
            output = layer.process_input(output)
        return output

    def _frozen_predictor(self) -> Predictor:
        """Return a predictor over a copy of the current parameters."""

        params = [
            (layer.weights.copy(), layer.biases.copy(), layer.activation)
            for layer in self._layers
        ]

        def _predict(x: Array) -> Array:
            output = np.asarray(x, dtype=np.float64)
            for weights, biases, activation in params:
                output = activation.value(biases + output @ weights)
            return output

        return _predict

    def _statistic(
        self, iteration: int, samples: Sequence[Sample]
    ) -> Tuple[IterationStatistic, Callable[[], None]]:
        """Build the statistic for ``iteration`` and a hook that pins its score.

        Until the hook runs the score is computed from the live parameters;
        afterwards from a snapshot, so a statistic read after later epochs
        still reports the loss of its own epoch.
        """

        frozen: List[Predictor] = []

        def _score() -> float:
            return self.loss(frozen[0] if frozen else self._forward, samples)

        statistic = IterationStatistic(iteration, _score)

        def _freeze() -> None:
            if not statistic.has_score and not frozen:
                frozen.append(self._frozen_predictor())

        return statistic, _freeze

    def _backpropagation(
        self,
        samples: Sequence[Sample],
        inputs: Array,
        targets: Array,
        condition: StoppingCondition,
    ) -> int:
        assert self._rng is not None
        iteration = 0
        while True:
            statistic, freeze = self._statistic(iteration, samples)
            self.notify_observers(statistic)
            stop = condition(statistic)
            freeze()
            if stop:
                return iteration
            order = self._rng.permutation(len(inputs))
            self._complete_epoch(inputs[order], targets[order])
            logger.debug("epoch %d complete", iteration)
            iteration += 1

    def _complete_epoch(self, inputs: Array, targets: Array) -> None:
        for x, expected in zip(inputs, targets):
            signal = expected - self._forward(x)
            for k in reversed(range(len(self._layers))):
                layer = self._layers[k]
                delta = layer.process_error(signal)
                prev_output = self._layers[k - 1].get_output_cache() if k else x
                layer.update(self.eta * np.outer(prev_output, delta), self.eta * delta)
                signal = delta


__all__ = ["IterativeModel", "Model", "Network", "NetworkState"]

"""feedforward public API."""

from .core import activations, initializers  # noqa: F401
from .core.activations import ActivationFunction, relu, repeat, sigmoid, tanh
from .core.exceptions import (
    ConfigurationError,
    FeedforwardError,
    MalformedSampleError,
    NotFittedError,
    ShapeMismatchError,
)
from .core.initializers import Gaussian, Uniform, Xavier
from .core.types import IterationStatistic, RunResult, Sample
from .training.losses import mean_square_error
from .training.network import Network
from .training.observers import LoggerObserver, NthIterationObserver, Subject
from .training.pipelines import load_preset, presets, run_pipeline
from .training.stopping import StoppingCondition, max_iter, precision

__all__ = [
    "ActivationFunction",
    "ConfigurationError",
    "FeedforwardError",
    "Gaussian",
    "IterationStatistic",
    "LoggerObserver",
    "MalformedSampleError",
    "Network",
    "NotFittedError",
    "NthIterationObserver",
    "RunResult",
    "Sample",
    "ShapeMismatchError",
    "StoppingCondition",
    "Subject",
    "Uniform",
    "Xavier",
    "activations",
    "initializers",
    "load_preset",
    "max_iter",
    "mean_square_error",
    "precision",
    "presets",
    "relu",
    "repeat",
    "run_pipeline",
    "sigmoid",
    "tanh",
]

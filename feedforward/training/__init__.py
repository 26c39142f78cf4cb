"""Training loop, stopping conditions and progress reporting."""

from .losses import LossFunction, Predictor, mean_square_error
from .network import IterativeModel, Model, Network, NetworkState
from .observers import HistoryObserver, LoggerObserver, ModelObserver, NthIterationObserver, Subject
from .stopping import StoppingCondition, max_iter, precision

__all__ = [
    "HistoryObserver",
    "IterativeModel",
    "LoggerObserver",
    "LossFunction",
    "Model",
    "ModelObserver",
    "Network",
    "NetworkState",
    "NthIterationObserver",
    "Predictor",
    "StoppingCondition",
    "Subject",
    "max_iter",
    "mean_square_error",
    "precision",
]

"""Exceptions raised by feedforward."""


class FeedforwardError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(FeedforwardError, ValueError):
    """Raised when a network, layer or pipeline is configured inconsistently."""


class NotFittedError(FeedforwardError, RuntimeError):
    """Raised when predicting with a model that has not been fitted."""


class ShapeMismatchError(FeedforwardError, ValueError):
    """Raised when an input or target vector does not match the layer widths."""


class MalformedSampleError(FeedforwardError, ValueError):
    """Raised when a line of a sample file cannot be parsed."""

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}: {line!r}")

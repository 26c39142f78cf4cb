"""Reporting utilities for feedforward."""

from .logger import configure_logging
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter

__all__ = ["configure_logging", "CsvSink", "JsonlSink", "PlotAdapter"]

"""Sample ingestion and built-in sample sets."""

from .registry import available_datasets, get_dataset, register_dataset
from .samples import Delimiters, load, parse_line, parse_lines

__all__ = [
    "Delimiters",
    "available_datasets",
    "get_dataset",
    "load",
    "parse_line",
    "parse_lines",
    "register_dataset",
]

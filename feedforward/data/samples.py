"""Load labelled samples from line-oriented text files.

Each non-blank line holds one sample::

    0.5,1.0 -> 1.0

with configurable delimiters between input values, between the input and
output parts, and between output values.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple

from ..core.exceptions import ConfigurationError, MalformedSampleError
from ..core.types import Sample


@dataclass(frozen=True)
class Delimiters:
    input_values: str = ","
    input_output: str = "->"
    output_values: str = ","

    def __post_init__(self) -> None:
        for field_name in ("input_values", "input_output", "output_values"):
            if not getattr(self, field_name):
                raise ConfigurationError(f"delimiter {field_name!r} must not be empty")
        if self.input_output in (self.input_values, self.output_values):
            raise ConfigurationError(
                f"input/output delimiter {self.input_output!r} must differ from the value delimiters"
            )


def _parse_values(raw: str, delimiter: str, part: str, line_number: int, line: str) -> Tuple[float, ...]:
    values: List[float] = []
    for token in raw.split(delimiter):
        token = token.strip()
        if not token:
            raise MalformedSampleError(line_number, line, f"empty {part} value")
        try:
            values.append(float(token))
        except ValueError:
            raise MalformedSampleError(
                line_number, line, f"invalid {part} value {token!r}"
            ) from None
    return tuple(values)


def parse_line(line: str, delimiters: Delimiters = Delimiters(), line_number: int = 1) -> Sample:
    parts = line.split(delimiters.input_output)
    if len(parts) != 2:
        raise MalformedSampleError(
            line_number,
            line,
            f"expected exactly one {delimiters.input_output!r} separator, found {len(parts) - 1}",
        )
    raw_input, raw_output = parts
    return Sample(
        _parse_values(raw_input, delimiters.input_values, "input", line_number, line),
        _parse_values(raw_output, delimiters.output_values, "output", line_number, line),
    )


def parse_lines(lines: Iterable[str], delimiters: Delimiters = Delimiters()) -> List[Sample]:
    samples: List[Sample] = []
    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        samples.append(parse_line(line, delimiters, line_number))
    return samples


def load(path: str | Path, delimiters: Delimiters = Delimiters()) -> List[Sample]:
    """Read every sample from ``path``."""

    with Path(path).open("r", encoding="utf-8") as handle:
        return parse_lines(handle, delimiters)


__all__ = ["Delimiters", "load", "parse_line", "parse_lines"]

"""Registry of named built-in sample sets."""

from __future__ import annotations

from typing import Callable, List, MutableMapping

from ..core.types import Sample

SampleFactory = Callable[[], List[Sample]]

_REGISTRY: MutableMapping[str, SampleFactory] = {}


def register_dataset(name: str | None = None):
    """Register a sample-set factory; usable as ``@register_dataset("xor")``."""

    def _decorator(func: SampleFactory) -> SampleFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    return _decorator


def get_dataset(name: str) -> List[Sample]:
    if name not in _REGISTRY:
        raise KeyError(f"Unknown dataset: {name}")
    return _REGISTRY[name]()


def available_datasets() -> List[str]:
    return sorted(_REGISTRY)


def _truth_table(fn: Callable[[int, int], int]) -> List[Sample]:
    return [Sample((a, b), (fn(a, b),)) for a in (0, 1) for b in (0, 1)]


@register_dataset("and")
def logical_and() -> List[Sample]:
    return _truth_table(lambda a, b: a & b)


@register_dataset("or")
def logical_or() -> List[Sample]:
    return _truth_table(lambda a, b: a | b)


@register_dataset("xor")
def logical_xor() -> List[Sample]:
    return _truth_table(lambda a, b: a ^ b)


__all__ = [
    "available_datasets",
    "get_dataset",
    "register_dataset",
]

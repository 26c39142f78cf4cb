"""Core numerical primitives for feedforward."""

from . import activations, exceptions, initializers, layers, parallel, types

__all__ = ["activations", "exceptions", "initializers", "layers", "parallel", "types"]

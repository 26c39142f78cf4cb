"""Loss functions used to score models against labelled samples."""

from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

from ..core.types import Array, Sample

# A prediction function; unlike a model it needs no fit phase, which is all
# scoring requires.
Predictor = Callable[[Array], Array]

LossFunction = Callable[[Predictor, Sequence[Sample]], float]


def mean_square_error(predictor: Predictor, samples: Sequence[Sample]) -> float:
    """Sum of squared output errors, averaged over the samples."""

    if not samples:
        raise ValueError("cannot score an empty sample set")
    total = 0.0
    for sample in samples:
        expected = np.asarray(sample.output, dtype=np.float64)
        actual = predictor(np.asarray(sample.input, dtype=np.float64))
        total += float(np.sum(np.square(expected - actual)))
    return total / len(samples)


__all__ = ["LossFunction", "Predictor", "mean_square_error"]

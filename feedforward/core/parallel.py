"""Data-parallel execution over disjoint neuron ranges."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, TypeVar

from .exceptions import ConfigurationError

T = TypeVar("T")

DEFAULT_PARALLEL_THRESHOLD = 512

SliceFn = Callable[[int, int], None]


def split_range(width: int, parts: int) -> List[tuple[int, int]]:
    """Split ``[0, width)`` into at most ``parts`` contiguous, non-empty ranges."""

    parts = max(1, min(parts, width))
    step, extra = divmod(width, parts)
    bounds: List[tuple[int, int]] = []
    lo = 0
    for idx in range(parts):
        hi = lo + step + (1 if idx < extra else 0)
        bounds.append((lo, hi))
        lo = hi
    return bounds


class NeuronPool:
    """Run slice computations on a thread pool with a join barrier.

    ``run_slices`` hands each worker a disjoint ``[lo, hi)`` neuron range and
    waits for all of them before returning.  Layers narrower than
    ``threshold`` are computed inline on the calling thread.  Worker
    exceptions are re-raised at the join.
    """

    def __init__(
        self,
        threshold: int = DEFAULT_PARALLEL_THRESHOLD,
        max_workers: int | None = None,
    ) -> None:
        if threshold < 1:
            raise ConfigurationError(f"parallel threshold must be positive, got {threshold}")
        self.threshold = threshold
        self.max_workers = max_workers or min(32, (os.cpu_count() or 1) + 4)
        self._executor: ThreadPoolExecutor | None = None

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="feedforward"
            )
        return self._executor

    @property
    def started(self) -> bool:
        """Whether worker threads have been created."""
        return self._executor is not None

    def run_slices(self, width: int, fn: SliceFn) -> None:
        if width < self.threshold or self.max_workers == 1:
            fn(0, width)
            return
        futures = [
            self._pool().submit(fn, lo, hi)
            for lo, hi in split_range(width, self.max_workers)
        ]
        for future in futures:
            future.result()

    def map(self, fn: Callable[[T], object], items: Sequence[T], *, inline: bool = False) -> None:
        """Apply ``fn`` to every item concurrently and wait for completion.

        With ``inline`` set, or a single item, the items are processed on the
        calling thread and no executor is started.
        """

        if inline or len(items) <= 1 or self.max_workers == 1:
            for item in items:
                fn(item)
            return
        list(self._pool().map(fn, items))

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "NeuronPool":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

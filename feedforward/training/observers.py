"""Publish/subscribe plumbing for training progress."""

from __future__ import annotations

import logging
from typing import List, Protocol, Tuple

from ..core.exceptions import ConfigurationError
from ..core.types import IterationStatistic

logger = logging.getLogger(__name__)


class ModelObserver(Protocol):
    """Receives one :class:`IterationStatistic` per epoch."""

    def update(self, statistic: IterationStatistic) -> None:
        ...


class Subject:
    """Ordered collection of observers.

    Observers are matched by identity, so two observers that compare equal
    are still distinct subscriptions.  Notification is synchronous and in
    subscription order; an observer that raises stops the notification and
    the exception propagates to the caller.
    """

    def __init__(self) -> None:
        self._observers: List[ModelObserver] = []

    @property
    def observers(self) -> Tuple[ModelObserver, ...]:
        return tuple(self._observers)

    def add_observer(self, observer: ModelObserver) -> ModelObserver:
        self._observers.append(observer)
        return observer

    def remove_observer(self, observer: ModelObserver) -> bool:
        """Unsubscribe ``observer``; return ``False`` if it was not subscribed."""

        for idx, attached in enumerate(self._observers):
            if attached is observer:
                del self._observers[idx]
                return True
        logger.debug("observer %r is not subscribed; nothing removed", observer)
        return False

    def notify_observers(self, statistic: IterationStatistic) -> None:
        for observer in list(self._observers):
            observer.update(statistic)


class NthIterationObserver:
    """Forward only statistics whose iteration is a multiple of ``every``."""

    def __init__(self, observer: ModelObserver, every: int) -> None:
        if every < 1:
            raise ConfigurationError(f"observer period must be positive, got {every}")
        self.observer = observer
        self.every = every

    def update(self, statistic: IterationStatistic) -> None:
        if statistic.iteration % self.every == 0:
            self.observer.update(statistic)


class LoggerObserver:
    """Log the iteration number and score of every statistic received."""

    def __init__(self, log: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.log = log or logger
        self.level = level

    def update(self, statistic: IterationStatistic) -> None:
        self.log.log(self.level, "iteration %d score %.6g", statistic.iteration, statistic.score)


class HistoryObserver:
    """Record ``(iteration, score)`` pairs in memory."""

    def __init__(self) -> None:
        self.history: List[Tuple[int, float]] = []

    def update(self, statistic: IterationStatistic) -> None:
        self.history.append((statistic.iteration, statistic.score))


__all__ = [
    "HistoryObserver",
    "LoggerObserver",
    "ModelObserver",
    "NthIterationObserver",
    "Subject",
]

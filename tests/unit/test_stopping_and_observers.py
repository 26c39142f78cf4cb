import logging

import pytest

from feedforward.core.exceptions import ConfigurationError
from feedforward.core.types import IterationStatistic
from feedforward.training.observers import (
    HistoryObserver,
    LoggerObserver,
    NthIterationObserver,
    Subject,
)
from feedforward.training.stopping import max_iter, precision


class _CountingScorer:
    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def __call__(self) -> float:
        self.calls += 1
        return self.value


def _exploding_scorer() -> float:
    raise AssertionError("score should not have been evaluated")


def test_statistic_score_is_computed_once():
    scorer = _CountingScorer(0.25)
    statistic = IterationStatistic(4, scorer)
    assert not statistic.has_score
    assert statistic.score == 0.25
    assert statistic.score == 0.25
    assert scorer.calls == 1
    assert statistic.has_score


def test_statistic_caches_nan_scores():
    scorer = _CountingScorer(float("nan"))
    statistic = IterationStatistic(0, scorer)
    statistic.score
    statistic.score
    assert scorer.calls == 1


def test_max_iter_and_precision():
    assert not max_iter(3)(IterationStatistic.with_score(2, 1.0))
    assert max_iter(3)(IterationStatistic.with_score(3, 1.0))
    assert precision(0.1)(IterationStatistic.with_score(0, 0.1))
    assert not precision(0.1)(IterationStatistic.with_score(0, 0.2))


def test_or_short_circuits_before_scoring():
    condition = max_iter(5).or_(precision(0.01))
    assert condition(IterationStatistic(5, _exploding_scorer))


def test_and_short_circuits_before_scoring():
    condition = max_iter(5).and_(precision(0.01))
    assert not condition(IterationStatistic(1, _exploding_scorer))


def test_combinators_do_not_mutate_operands():
    base = max_iter(2)
    negated = base.not_()
    statistic = IterationStatistic.with_score(3, 0.0)
    assert base(statistic)
    assert not negated(statistic)
    assert (~base)(IterationStatistic.with_score(1, 0.0))
    assert (base | precision(0.5))(IterationStatistic.with_score(0, 0.4))
    assert not (base & precision(0.5))(IterationStatistic.with_score(0, 0.4))
    assert str(base.or_(precision(0.5))) == "(max_iter(2) or precision(0.5))"


def test_subject_notifies_in_subscription_order():
    subject = Subject()
    calls = []

    class _Recorder:
        def __init__(self, name):
            self.name = name

        def update(self, statistic):
            calls.append((self.name, statistic.iteration))

    subject.add_observer(_Recorder("a"))
    subject.add_observer(_Recorder("b"))
    subject.notify_observers(IterationStatistic.with_score(7, 0.0))
    assert calls == [("a", 7), ("b", 7)]


def test_remove_observer_by_identity():
    subject = Subject()
    first = HistoryObserver()
    second = HistoryObserver()
    subject.add_observer(first)
    subject.add_observer(second)
    assert subject.remove_observer(second) is True
    assert subject.observers == (first,)


def test_remove_missing_observer_is_a_noop():
    subject = Subject()
    attached = HistoryObserver()
    subject.add_observer(attached)
    assert subject.remove_observer(HistoryObserver()) is False
    assert subject.observers == (attached,)


def test_failing_observer_propagates_and_stops_notification():
    subject = Subject()
    after = HistoryObserver()

    class _Failing:
        def update(self, statistic):
            raise RuntimeError("sink unavailable")

    subject.add_observer(_Failing())
    subject.add_observer(after)
    with pytest.raises(RuntimeError):
        subject.notify_observers(IterationStatistic.with_score(0, 1.0))
    assert after.history == []


def test_nth_iteration_observer_forwards_multiples():
    history = HistoryObserver()
    observer = NthIterationObserver(history, 3)
    for iteration in range(8):
        observer.update(IterationStatistic.with_score(iteration, float(iteration)))
    assert [it for it, _ in history.history] == [0, 3, 6]
    with pytest.raises(ConfigurationError):
        NthIterationObserver(history, 0)


def test_logger_observer_logs_iteration_and_score(caplog):
    caplog.set_level(logging.INFO, logger="feedforward.training.observers")
    LoggerObserver().update(IterationStatistic.with_score(12, 0.125))
    assert "iteration 12 score 0.125" in caplog.text


def test_negative_max_iter_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        max_iter(-1)

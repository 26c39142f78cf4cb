import numpy as np
import pytest

from feedforward.core.activations import identity, sigmoid, tanh
from feedforward.core.exceptions import ConfigurationError, NotFittedError, ShapeMismatchError
from feedforward.core.initializers import Uniform, Xavier
from feedforward.core.layers import LayerRole
from feedforward.core.types import Sample
from feedforward.data import get_dataset
from feedforward.training.network import Network, NetworkState
from feedforward.training.observers import HistoryObserver
from feedforward.training.stopping import max_iter, precision


class _Constant:
    def __init__(self, value: float) -> None:
        self.value = value

    def initialize(self, weights, rng=None):
        weights[...] = self.value


class _IterationRecorder:
    def __init__(self) -> None:
        self.iterations = []

    def update(self, statistic):
        self.iterations.append(statistic.iteration)


def _network(**kwargs):
    params = dict(seed=0, stopping_condition=max_iter(10))
    params.update(kwargs)
    return Network([2, 3, 1], sigmoid(), Uniform(-1.0, 1.0), 0.1, **params)


def test_constructs_one_layer_per_transition():
    network = Network([4, 6, 5, 2], [tanh(), tanh(), sigmoid()], Xavier(), 0.05)
    assert [layer.width for layer in network.layers] == [6, 5, 2]
    assert [layer.role for layer in network.layers] == [
        LayerRole.HIDDEN,
        LayerRole.HIDDEN,
        LayerRole.OUTPUT,
    ]
    for layer in network.layers[:-1]:
        assert layer.next_weights.shape[0] == layer.width
    assert network.state is NetworkState.UNFITTED


@pytest.mark.parametrize(
    "neurons, activations, eta",
    [
        ([2], sigmoid(), 0.1),
        ([2, 0, 1], sigmoid(), 0.1),
        ([2, 2, 1], [sigmoid()], 0.1),
        ([2, 1], sigmoid(), 0.0),
    ],
)
def test_invalid_configuration_is_rejected(neurons, activations, eta):
    with pytest.raises(ConfigurationError):
        Network(neurons, activations, Uniform(), eta)


def test_predict_before_fit_raises():
    network = _network()
    with pytest.raises(NotFittedError):
        network.predict([0.0, 1.0])
    with pytest.raises(NotFittedError):
        network.score(get_dataset("and"))


def test_predict_after_fit_is_repeatable():
    network = _network().fit(get_dataset("and"))
    assert network.is_fitted
    first = network.predict([1.0, 1.0])
    second = network.predict([1.0, 1.0])
    assert first.shape == (1,)
    assert np.array_equal(first, second)


def test_predict_does_not_train():
    network = _network().fit(get_dataset("and"))
    before = [layer.weights.copy() for layer in network.layers]
    network.predict([0.0, 1.0])
    for layer, weights in zip(network.layers, before):
        assert np.array_equal(layer.weights, weights)


def test_shape_errors_are_raised_before_training():
    network = _network()
    with pytest.raises(ShapeMismatchError):
        network.fit([Sample((0.0, 1.0, 2.0), (1.0,))])
    with pytest.raises(ShapeMismatchError):
        network.fit([Sample((0.0, 1.0), (1.0, 0.0))])
    with pytest.raises(ShapeMismatchError):
        network.fit([])
    assert network.state is NetworkState.UNFITTED

    network.fit(get_dataset("and"))
    with pytest.raises(ShapeMismatchError):
        network.predict([1.0])


def test_samples_are_not_mutated():
    samples = get_dataset("or")
    snapshot = list(samples)
    _network().fit(samples)
    assert samples == snapshot


def test_max_iter_or_precision_stops_at_iteration_budget():
    recorder = _IterationRecorder()
    network = _network()
    network.add_observer(recorder)
    network.fit(get_dataset("xor"), max_iter(25).or_(precision(-1.0)))
    assert network.iterations == 25
    assert recorder.iterations == list(range(26))


def test_precision_stops_early():
    network = _network()
    network.fit(get_dataset("and"), max_iter(50).or_(precision(10.0)))
    assert network.iterations == 0
    assert network.is_fitted


def test_failing_observer_leaves_network_unfitted():
    class _Failing:
        def update(self, statistic):
            raise RuntimeError("observer failed")

    network = _network()
    network.add_observer(_Failing())
    with pytest.raises(RuntimeError):
        network.fit(get_dataset("and"))
    assert network.state is NetworkState.UNFITTED


def test_single_layer_update_matches_delta_rule():
    network = Network([2, 1], identity(), _Constant(0.5), 0.1, stopping_condition=max_iter(1))
    network.fit([Sample((1.0, 2.0), (1.0,))])
    layer = network.layers[0]
    # output 1.5, delta -0.5
    assert np.allclose(layer.weights, [[0.45], [0.4]])
    assert np.allclose(layer.biases, [-0.05])


def test_hidden_update_uses_freshly_updated_next_weights():
    network = Network([1, 1, 1], identity(), _Constant(0.5), 0.1, stopping_condition=max_iter(1))
    network.fit([Sample((2.0,), (1.0,))])
    hidden, output = network.layers
    # hidden output 1.0, network output 0.5, output delta 0.5
    assert np.allclose(output.weights, [[0.55]])
    assert np.allclose(output.biases, [0.05])
    # hidden delta = 0.55 * 0.5
    assert np.allclose(hidden.weights, [[0.5 + 0.1 * 2.0 * 0.275]])
    assert np.allclose(hidden.biases, [0.1 * 0.275])


def test_same_seed_reproduces_training():
    samples = get_dataset("xor")
    first = _network(seed=42).fit(samples)
    second = _network(seed=42).fit(samples)
    for a, b in zip(first.layers, second.layers):
        assert np.array_equal(a.weights, b.weights)
        assert np.array_equal(a.biases, b.biases)


def test_refit_reinitialises_parameters():
    samples = get_dataset("and")
    network = _network(seed=3)
    network.fit(samples)
    once = [layer.weights.copy() for layer in network.layers]
    network.fit(samples)
    for layer, weights in zip(network.layers, once):
        assert np.array_equal(layer.weights, weights)


def test_partial_fit_continues_from_current_parameters():
    samples = get_dataset("and")
    history = HistoryObserver()
    network = _network(seed=1)
    network.add_observer(history)
    network.fit(samples, max_iter(20))
    score_after_fit = history.history[-1][1]
    history.history.clear()
    network.partial_fit(samples, max_iter(20))
    assert history.history[0][1] == pytest.approx(score_after_fit)
    assert network.is_fitted


def test_parallel_network_matches_serial():
    samples = get_dataset("xor")
    serial = _network(seed=9, parallel_threshold=10_000).fit(samples)
    with _network(seed=9, parallel_threshold=1) as parallel:
        parallel.fit(samples)
        for a, b in zip(serial.layers, parallel.layers):
            assert np.allclose(a.weights, b.weights)


def test_retained_statistic_scores_parameters_of_its_iteration():
    samples = get_dataset("xor")
    kept = []

    class _KeepFirst:
        def update(self, statistic):
            if statistic.iteration == 0:
                kept.append(statistic)

    network = _network(stopping_condition=max_iter(500))
    network.add_observer(_KeepFirst())
    network.fit(samples)

    reference = _network(stopping_condition=max_iter(0)).fit(samples)
    assert not kept[0].has_score
    assert kept[0].score == pytest.approx(reference.score(samples))
    assert kept[0].score != pytest.approx(network.score(samples))


def test_retained_statistic_survives_refit():
    samples = get_dataset("and")
    kept = []

    class _KeepAll:
        def update(self, statistic):
            kept.append(statistic)

    network = _network(stopping_condition=max_iter(3))
    network.add_observer(_KeepAll())
    network.fit(samples)
    before = [statistic.score for statistic in kept]

    kept.clear()
    network.fit(samples)
    network.partial_fit(samples)
    assert [statistic.score for statistic in kept[:4]] == pytest.approx(before)


def test_small_layers_initialise_without_worker_threads():
    with _network() as network:
        network.fit(get_dataset("and"))
        assert not network.pool.started


def test_wide_layers_initialise_on_worker_threads():
    with Network(
        [2, 4, 1], sigmoid(), Uniform(-1.0, 1.0), 0.1,
        seed=0, stopping_condition=max_iter(1), parallel_threshold=2,
    ) as network:
        network.fit(get_dataset("and"))
        assert network.pool.started
    assert not network.pool.started

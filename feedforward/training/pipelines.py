"""Config-driven assembly of networks, samples and training runs."""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from ..core.activations import get_activation
from ..core.exceptions import ConfigurationError
from ..core.initializers import get_initializer
from ..core.types import RunResult, Sample
from ..data import registry
from ..data.samples import Delimiters, load
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from .network import Network
from .observers import LoggerObserver, ModelObserver, NthIterationObserver
from .stopping import StoppingCondition, max_iter, precision

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, Any]] = {
    "logical-and": {
        "data": {"name": "and"},
        "model": {
            "neurons": [2, 2, 1],
            "activations": "sigmoid",
            "initializer": {"name": "uniform", "lb": -1.0, "ub": 1.0},
            "eta": 0.1,
        },
        "train": {"max_iter": 5000, "precision": None, "seed": 0, "log_every": 500},
    },
    "logical-or": {
        "data": {"name": "or"},
        "model": {
            "neurons": [2, 2, 1],
            "activations": "sigmoid",
            "initializer": {"name": "uniform", "lb": -1.0, "ub": 1.0},
            "eta": 0.1,
        },
        "train": {"max_iter": 5000, "precision": 0.01, "seed": 0, "log_every": 500},
    },
    "logical-xor": {
        "data": {"name": "xor"},
        "model": {
            "neurons": [2, 4, 1],
            "activations": ["tanh", "sigmoid"],
            "initializer": {"name": "xavier"},
            "eta": 0.3,
        },
        "train": {"max_iter": 10000, "precision": 0.01, "seed": 7, "log_every": 1000},
    },
}

_REQUIRED_SECTIONS = {"data", "model", "train"}


def presets() -> Mapping[str, Mapping[str, Any]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Dict[str, Any]:
    try:
        return deepcopy(dict(_PRESETS[name]))
    except KeyError:
        available = ", ".join(sorted(_PRESETS))
        raise ConfigurationError(f"Unknown preset {name!r}. Available presets: {available}") from None


def load_config(path: str | Path) -> Dict[str, Any]:
    """Read a JSON or YAML config file into a mapping."""

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise ConfigurationError(f"Unsupported config file type: {path.suffix}")
    text = path.read_text()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Config {path.name} must decode to a mapping")
    return dict(data)


def merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), Mapping):
            base[key] = merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def _sections(config: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any], Dict[str, Any]]:
    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise ConfigurationError(
            f"Config is missing required sections: {', '.join(sorted(missing))}"
        )
    return dict(config["data"]), dict(config["model"]), dict(config["train"])


def _coerce(kind: type, value: Any, key: str) -> Any:
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"config value {key!r} is not a valid {kind.__name__}: {value!r}"
        ) from None


def build_network(config: Mapping[str, Any]) -> Network:
    _, model_cfg, train_cfg = _sections(config)
    try:
        neurons = [_coerce(int, n, "neurons") for n in model_cfg["neurons"]]
        eta = _coerce(float, model_cfg["eta"], "eta")
    except KeyError as exc:
        raise ConfigurationError(f"model config is missing {exc.args[0]!r}") from None
    except TypeError:
        raise ConfigurationError("model config 'neurons' must be a list of widths") from None

    raw_activations = model_cfg.get("activations", "sigmoid")
    if isinstance(raw_activations, str):
        activations = get_activation(raw_activations)
    else:
        activations = [get_activation(name) for name in raw_activations]

    init_cfg = dict(model_cfg.get("initializer", {"name": "xavier"}))
    initializer = get_initializer(str(init_cfg.pop("name", "xavier")), **init_cfg)

    seed = train_cfg.get("seed")
    kwargs: Dict[str, Any] = {
        "stopping_condition": build_stopping_condition(train_cfg),
        "seed": None if seed is None else _coerce(int, seed, "seed"),
    }
    if train_cfg.get("parallel_threshold") is not None:
        kwargs["parallel_threshold"] = _coerce(
            int, train_cfg["parallel_threshold"], "parallel_threshold"
        )
    return Network(neurons, activations, initializer, eta, **kwargs)


def build_stopping_condition(train_cfg: Mapping[str, Any]) -> StoppingCondition:
    condition = max_iter(_coerce(int, train_cfg.get("max_iter", 1000), "max_iter"))
    target = train_cfg.get("precision")
    if target is not None:
        condition = condition.or_(precision(_coerce(float, target, "precision")))
    return condition


def load_samples(data_cfg: Mapping[str, Any]) -> List[Sample]:
    if "path" in data_cfg:
        try:
            delimiters = Delimiters(**dict(data_cfg.get("delimiters", {})))
        except TypeError as exc:
            raise ConfigurationError(f"Invalid delimiters: {exc}") from exc
        return load(data_cfg["path"], delimiters)
    if "name" in data_cfg:
        try:
            return registry.get_dataset(str(data_cfg["name"]))
        except KeyError as exc:
            raise ConfigurationError(str(exc.args[0])) from None
    raise ConfigurationError("data config needs either 'path' or 'name'")


def build_observers(train_cfg: Mapping[str, Any]) -> List[ModelObserver]:
    observers: List[ModelObserver] = []
    log_every = _coerce(int, train_cfg.get("log_every", 0) or 0, "log_every")
    if log_every > 0:
        observers.append(NthIterationObserver(LoggerObserver(), log_every))
    if train_cfg.get("metrics_path"):
        observers.append(JsonlSink(train_cfg["metrics_path"], seed=train_cfg.get("seed")))
    if train_cfg.get("csv_path"):
        observers.append(CsvSink(train_cfg["csv_path"]))
    if train_cfg.get("plot_dir"):
        observers.append(PlotAdapter(train_cfg["plot_dir"], enable_plots=True))
    return observers


def run_pipeline(
    config: Mapping[str, Any],
    predict_inputs: Sequence[Sequence[float]] | None = None,
) -> RunResult:
    """Fit a network described by ``config`` and report the outcome.

    Predictions are made for ``predict_inputs`` when given, otherwise for the
    inputs of the training samples.
    """

    data_cfg, _, train_cfg = _sections(config)
    samples = load_samples(data_cfg)
    observers = build_observers(train_cfg)
    with build_network(config) as network:
        for observer in observers:
            network.add_observer(observer)
        try:
            network.fit(samples)
        finally:
            for observer in observers:
                if isinstance(observer, PlotAdapter):
                    observer.close()
        score = network.score(samples)
        queries = predict_inputs if predict_inputs is not None else [s.input for s in samples]
        predictions = [network.predict(x).tolist() for x in queries]
    logger.info("pipeline finished after %d iterations with score %.6g", network.iterations, score)
    return RunResult(iterations=network.iterations, score=score, predictions=predictions)


__all__ = [
    "build_network",
    "build_observers",
    "build_stopping_condition",
    "load_config",
    "load_preset",
    "load_samples",
    "merge",
    "presets",
    "run_pipeline",
]

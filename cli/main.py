"""Command line entry point for training feedforward networks."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, List

from feedforward.core.exceptions import FeedforwardError
from feedforward.core.types import RunResult
from feedforward.reporting.logger import configure_logging
from feedforward.training import pipelines

logger = logging.getLogger("feedforward.cli")


def _format_result(result: RunResult) -> str:
    payload = {
        "iterations": result.iterations,
        "score": result.score,
        "predictions": result.predictions,
    }
    return json.dumps(payload, sort_keys=True)


def _parse_vector(raw: str) -> List[float]:
    try:
        return [float(token) for token in raw.split(",")]
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a comma separated vector: {raw!r}") from None


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=sorted(pipelines.presets().keys()),
        default="logical-and",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--data", type=Path, help="Sample file replacing the configured data")
    parser.add_argument("--input-delimiter", default=",", help="Delimiter between input values")
    parser.add_argument("--io-delimiter", default="->", help="Delimiter between inputs and outputs")
    parser.add_argument("--output-delimiter", default=",", help="Delimiter between output values")
    parser.add_argument("--seed", type=int, help="Seed for initialisation and shuffling")
    parser.add_argument("--eta", type=float, help="Learning rate")
    parser.add_argument("--max-iter", type=int, help="Maximum number of epochs")
    parser.add_argument("--precision", type=float, help="Stop once the score reaches this value")
    parser.add_argument("--log-every", type=int, help="Log the score every N iterations")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument("--log-file", type=Path, help="Also write the log to this file")
    parser.add_argument("--metrics-path", type=Path, help="Write per-iteration scores as JSONL")
    parser.add_argument(
        "--predict",
        type=_parse_vector,
        action="append",
        help="Input vector to predict after training (repeatable)",
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> dict:
    config = pipelines.load_preset(args.preset)
    if args.config:
        override = pipelines.load_config(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = override
        else:
            config = pipelines.merge(config, override)
    config = json.loads(json.dumps(config))

    if args.data:
        config["data"] = {
            "path": str(args.data),
            "delimiters": {
                "input_values": args.input_delimiter,
                "input_output": args.io_delimiter,
                "output_values": args.output_delimiter,
            },
        }
    model_cfg = config.setdefault("model", {})
    train_cfg = config.setdefault("train", {})
    if args.eta is not None:
        model_cfg["eta"] = args.eta
    if args.seed is not None:
        train_cfg["seed"] = args.seed
    if args.max_iter is not None:
        train_cfg["max_iter"] = args.max_iter
    if args.precision is not None:
        train_cfg["precision"] = args.precision
    if args.log_every is not None:
        train_cfg["log_every"] = args.log_every
    if args.metrics_path is not None:
        train_cfg["metrics_path"] = str(args.metrics_path)
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    configure_logging(args.log_level, filename=args.log_file)

    try:
        config = resolve_config(args)
        if args.dump_config:
            args.dump_config.parent.mkdir(parents=True, exist_ok=True)
            args.dump_config.write_text(json.dumps(config, indent=2))
        result = pipelines.run_pipeline(config, predict_inputs=args.predict)
    except FeedforwardError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(_format_result(result))


if __name__ == "__main__":
    main()

"""Command line entry point for neurograph models."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable, List

from neurograph import config
from neurograph.errors import NeuroGraphError
from neurograph.graph import NeuralNet
from neurograph.models import XOR_CASES, build_xor
from neurograph.reporting import dumps_summary, write_summary
from neurograph.serialization import load_model


def _parse_vector(text: str) -> List[float]:
    try:
        return [float(part) for part in text.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid input vector {text!r}") from exc


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (defaults to ${config.LOG_LEVEL_ENV} or WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a model on one or more input vectors")
    run.add_argument("model", type=Path, help="Path to a model file")
    run.add_argument(
        "--input",
        dest="inputs",
        action="append",
        type=_parse_vector,
        required=True,
        help="Comma separated input vector; repeat for a sequence",
    )
    run.add_argument(
        "--reset",
        action="store_true",
        help="Reset recurrent state before every input",
    )

    inspect = sub.add_parser("inspect", help="Print a JSON summary of a model")
    inspect.add_argument("model", type=Path, help="Path to a model file")
    inspect.add_argument("--out", type=Path, help="Also write the summary here")

    xor = sub.add_parser("xor", help="Write the reference XOR model")
    xor.add_argument("out", type=Path, help="Destination model file")
    return parser.parse_args(argv)


def _load(path: Path) -> NeuralNet:
    try:
        return load_model(path)
    except FileNotFoundError:
        raise SystemExit(f"No model found at {path}") from None
    except NeuroGraphError as exc:
        raise SystemExit(f"Cannot read {path}: {exc}") from None


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    config.configure_logging(args.log_level.upper() if args.log_level else None)

    if args.command == "xor":
        net = build_xor()
        if not net.write(args.out):
            raise SystemExit(f"Failed to write {args.out}")
        cases = {",".join(f"{v:g}" for v in x): float(net.run(x)[0]) for x, _ in XOR_CASES}
        print(json.dumps({"model": str(args.out), "outputs": cases}, sort_keys=True))
        return

    net = _load(args.model)

    if args.command == "inspect":
        if args.out:
            write_summary(net, args.out)
        print(dumps_summary(net))
        return

    outputs = []
    for vector in args.inputs:
        if args.reset:
            net.reset()
        try:
            outputs.append(net.run(vector).tolist())
        except (ValueError, NeuroGraphError) as exc:
            raise SystemExit(str(exc)) from None
    print(json.dumps({"outputs": outputs}, sort_keys=True))


if __name__ == "__main__":
    main()

"""Command-line entry points for the offline training pipeline.

Commands:
    sleuth-convert-grid  - GRiD-style CSV to raw JSONL
    sleuth-convert-hc3   - HC3 JSON/JSONL to raw JSONL
    sleuth-label-dump    - collected rss-train-data dumps to featurized JSONL
    sleuth-featurize     - raw JSONL to featurized JSONL
    sleuth-train         - featurized JSONL to a model artifact
    sleuth-eval          - accuracy/precision/recall at one or more thresholds
    sleuth-embed         - replace the embedded default model with an artifact

Usage:
    sleuth-convert-grid --in grid.csv --out data/raw.jsonl
    sleuth-featurize --in data/raw.jsonl --out data/train.jsonl
    sleuth-train --in data/train.jsonl --out data/model.json
    sleuth-eval --in data/raw.jsonl --sweep 0.5,0.7,0.84,0.9
    sleuth-embed --model data/model.json

Every command exits 0 on success and 2 on usage or data errors. Outputs are
written atomically, so a failed run leaves no partial file behind.
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
from pathlib import Path

from rich.console import Console

from sleuth_utils import get_logger
from slopsleuth.errors import DatasetError, SleuthError
from slopsleuth.linear import (
    TrainOptions,
    embed_model,
    load_artifact,
    load_default_model,
    write_artifact,
)
from slopsleuth.training.datasets import (
    ConversionResult,
    convert_grid_csv,
    convert_hc3,
    label_train_dump,
    read_jsonl,
    write_jsonl,
)
from slopsleuth.training.evaluate import (
    examples_from_records,
    parse_thresholds,
    results_table,
    sweep,
)
from slopsleuth.training.featurize import featurize_records
from slopsleuth.training.trainer import CLI_TRAIN_OPTIONS, train_artifact

log = get_logger("slopsleuth.training.cli")

EXIT_OK = 0
EXIT_ERROR = 2


def _run(command: str, body: Callable[[], None]) -> int:
    """Run a command body, mapping pipeline errors to exit code 2."""
    try:
        body()
    except SleuthError as e:
        log.error("command_failed", command=command, code=str(e.code), error=e.message)
        Console(stderr=True, highlight=False).print(f"Error: {e.message}", markup=False)
        return EXIT_ERROR
    return EXIT_OK


def _io_parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument("--in", dest="input", type=Path, required=True, help="Input file")
    parser.add_argument("--out", dest="output", type=Path, required=True, help="Output file")
    return parser


def _write_rows(output: Path, result: ConversionResult, source: Path) -> None:
    if not result.rows:
        raise DatasetError.empty(source)
    write_jsonl(output, result.rows)
    log.info(
        "rows_written",
        output=str(output),
        rows=len(result.rows),
        skipped=result.skipped,
    )
    Console(highlight=False).print(
        f"Wrote {len(result.rows)} rows to {output} "
        f"(human={result.count('human')}, ai={result.count('ai')}, skipped={result.skipped})",
        markup=False,
    )


def convert_grid_main(argv: Sequence[str] | None = None) -> int:
    parser = _io_parser("sleuth-convert-grid", "Convert a GRiD-style CSV to raw JSONL.")
    parser.add_argument("--text-col", default="Data", help="Text column (default: Data)")
    parser.add_argument("--label-col", default="Label", help="Label column, 0=human 1=ai")
    parser.add_argument("--limit", type=int, default=None, help="Stop after N rows")
    args = parser.parse_args(argv)

    def body() -> None:
        result = convert_grid_csv(
            args.input,
            text_col=args.text_col,
            label_col=args.label_col,
            limit=args.limit,
        )
        _write_rows(args.output, result, args.input)

    return _run("convert-grid", body)


def convert_hc3_main(argv: Sequence[str] | None = None) -> int:
    parser = _io_parser("sleuth-convert-hc3", "Convert an HC3 export to raw JSONL.")
    parser.add_argument("--limit", type=int, default=None, help="Stop after N rows")
    parser.add_argument(
        "--max-per-record",
        type=int,
        default=None,
        help="Keep at most N answers per side of each record",
    )
    args = parser.parse_args(argv)

    def body() -> None:
        result = convert_hc3(args.input, limit=args.limit, max_per_record=args.max_per_record)
        _write_rows(args.output, result, args.input)

    return _run("convert-hc3", body)


def label_dump_main(argv: Sequence[str] | None = None) -> int:
    parser = _io_parser(
        "sleuth-label-dump",
        "Label collected rss-train-data dumps as featurized JSONL.",
    )
    parser.add_argument(
        "--label",
        choices=["human", "ai", "model"],
        default="human",
        help="Fixed label, or 'model' to pseudo-label with the default model",
    )
    parser.add_argument("--ai-threshold", type=float, default=0.92)
    parser.add_argument("--human-threshold", type=float, default=0.10)
    parser.add_argument("--min-words", type=int, default=6)
    args = parser.parse_args(argv)

    def body() -> None:
        result = label_train_dump(
            args.input,
            mode=args.label,
            model=load_default_model() if args.label == "model" else None,
            ai_threshold=args.ai_threshold,
            human_threshold=args.human_threshold,
            min_words=args.min_words,
        )
        _write_rows(args.output, result, args.input)

    return _run("label-dump", body)


def featurize_main(argv: Sequence[str] | None = None) -> int:
    parser = _io_parser("sleuth-featurize", "Turn raw labelled text into feature maps.")
    args = parser.parse_args(argv)

    def body() -> None:
        records = [obj for _, obj in read_jsonl(args.input)]
        _write_rows(args.output, featurize_records(records), args.input)

    return _run("featurize", body)


def train_main(argv: Sequence[str] | None = None) -> int:
    parser = _io_parser("sleuth-train", "Train a logistic-regression model artifact.")
    parser.add_argument("--epochs", type=int, default=CLI_TRAIN_OPTIONS.epochs)
    parser.add_argument("--lr", type=float, default=CLI_TRAIN_OPTIONS.lr)
    parser.add_argument("--l2", type=float, default=CLI_TRAIN_OPTIONS.l2)
    parser.add_argument("--seed", type=int, default=CLI_TRAIN_OPTIONS.seed)
    parser.add_argument("--min-samples", type=int, default=CLI_TRAIN_OPTIONS.min_samples)
    args = parser.parse_args(argv)

    def body() -> None:
        records = [obj for _, obj in read_jsonl(args.input)]
        featurized = featurize_records(records)
        options = TrainOptions(
            epochs=args.epochs,
            lr=args.lr,
            l2=args.l2,
            shuffle=True,
            seed=args.seed,
            min_samples=args.min_samples,
        )
        artifact = train_artifact(featurized.rows, options)
        write_artifact(artifact, args.output)
        Console(highlight=False).print(
            f"Wrote {args.output} (n={artifact.n}, features={len(artifact.model.weights)})",
            markup=False,
        )

    return _run("train", body)


def eval_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sleuth-eval",
        description="Evaluate a model on labelled raw or featurized rows.",
    )
    parser.add_argument("--in", dest="input", type=Path, required=True, help="Input JSONL")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--threshold", type=float, help="Single decision threshold")
    group.add_argument("--sweep", help="Comma-separated thresholds, e.g. 0.5,0.7,0.9")
    parser.add_argument("--model", type=Path, default=None, help="Artifact (default: embedded)")
    args = parser.parse_args(argv)

    def body() -> None:
        thresholds = (
            parse_thresholds(args.sweep)
            if args.sweep is not None
            else parse_thresholds(str(args.threshold))
        )
        model = load_artifact(args.model).model if args.model else load_default_model()
        examples = examples_from_records(obj for _, obj in read_jsonl(args.input))
        if not examples:
            raise DatasetError.empty(args.input)
        results = sweep(examples, model, thresholds)
        Console().print(results_table(results, title=f"{args.input.name} (n={len(examples)})"))

    return _run("eval", body)


def embed_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sleuth-embed",
        description="Replace the embedded default model with a trained artifact.",
    )
    parser.add_argument("--model", type=Path, required=True, help="Trainer artifact JSON")
    parser.add_argument(
        "--target",
        "--userscript",
        dest="target",
        type=Path,
        default=None,
        help="Embedded model file to rewrite (default: the packaged model)",
    )
    args = parser.parse_args(argv)

    def body() -> None:
        artifact = load_artifact(args.model)
        target = embed_model(artifact, args.target)
        Console(highlight=False).print(f"Embedded model into {target}", markup=False)

    return _run("embed", body)

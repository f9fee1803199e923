"""Offline evaluation of a model at one or more decision thresholds."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from rich.table import Table

from slopsleuth.errors import DatasetError
from slopsleuth.linear import LinearModel, predict_proba
from slopsleuth.training.datasets import parse_label
from slopsleuth.training.featurize import features_for_record


@dataclass(frozen=True)
class Example:
    """Ground truth plus the feature map the model sees."""

    is_ai: bool
    features: dict[str, float]


@dataclass(frozen=True)
class EvalResult:
    """Confusion counts at one threshold."""

    threshold: float
    tp: int
    fp: int
    tn: int
    fn: int

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn

    @property
    def accuracy(self) -> float:
        return (self.tp + self.tn) / (self.total or 1)

    @property
    def precision(self) -> float:
        return self.tp / ((self.tp + self.fp) or 1)

    @property
    def recall(self) -> float:
        return self.tp / ((self.tp + self.fn) or 1)


def examples_from_records(records: Iterable[dict[str, Any]]) -> list[Example]:
    """Build examples from raw (``text``) or featurized (``features``) rows."""
    examples = []
    for record in records:
        label = parse_label(record.get("label"))
        if label is None:
            continue
        examples.append(Example(is_ai=label == "ai", features=features_for_record(record)))
    return examples


def evaluate_at(
    examples: Sequence[Example],
    model: LinearModel,
    threshold: float,
    probabilities: Sequence[float] | None = None,
) -> EvalResult:
    """Compare ``predict_proba >= threshold`` against the labels."""
    probs = probabilities or [predict_proba(model, ex.features) for ex in examples]
    tp = fp = tn = fn = 0
    for ex, p in zip(examples, probs, strict=True):
        predicted_ai = p >= threshold
        if predicted_ai and ex.is_ai:
            tp += 1
        elif predicted_ai:
            fp += 1
        elif not ex.is_ai:
            tn += 1
        else:
            fn += 1
    return EvalResult(threshold=threshold, tp=tp, fp=fp, tn=tn, fn=fn)


def sweep(
    examples: Sequence[Example],
    model: LinearModel,
    thresholds: Iterable[float],
) -> list[EvalResult]:
    """Evaluate several thresholds, scoring every example only once."""
    probs = [predict_proba(model, ex.features) for ex in examples]
    return [evaluate_at(examples, model, t, probs) for t in thresholds]


def parse_thresholds(raw: str) -> list[float]:
    """Parse a comma-separated threshold list like ``"0.5,0.7,0.9"``.

    Raises:
        DatasetError: If no entry parses as a number in [0, 1].
    """
    values = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            value = float(part)
        except ValueError as e:
            raise DatasetError.invalid_argument(f"Invalid threshold: {part!r}") from e
        if not 0.0 <= value <= 1.0:
            raise DatasetError.invalid_argument(f"Threshold out of range [0, 1]: {value}")
        values.append(value)
    if not values:
        raise DatasetError.invalid_argument("No thresholds given")
    return values


def _pct(x: float) -> str:
    return f"{round(x * 1000) / 10}%"


def results_table(results: Sequence[EvalResult], title: str) -> Table:
    """Render results as a rich table, one row per threshold."""
    table = Table(title=title)
    for column in ("t", "acc", "prec", "rec", "TP", "FP", "TN", "FN"):
        table.add_column(column, justify="right")
    for r in results:
        table.add_row(
            f"{r.threshold:g}",
            _pct(r.accuracy),
            _pct(r.precision),
            _pct(r.recall),
            str(r.tp),
            str(r.fp),
            str(r.tn),
            str(r.fn),
        )
    return table

"""Dataset readers, writers and format converters.

Every converter produces the raw training contract, one JSON object per line:
``{"label": "human" | "ai", "text": "..."}``. The featurizer turns that into
``{"label": ..., "features": {...}}``.
"""

from __future__ import annotations

import csv
import io
import json
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel

from sleuth_utils import StrictModel, get_logger
from slopsleuth.errors import DatasetError
from slopsleuth.features import normalize_feature_map
from slopsleuth.fileio import atomic_write_text
from slopsleuth.linear import LinearModel, predict_proba

log = get_logger("slopsleuth.training.datasets")

Label = Literal["human", "ai"]
LABELS: tuple[str, ...] = ("human", "ai")

TRAIN_DUMP_KIND = "rss-train-data"

# Feature maps store word count scaled by this cap.
WORD_COUNT_CAP = 600


class RawRow(StrictModel):
    """Raw stage: labelled text."""

    label: Label
    text: str


class FeaturizedRow(StrictModel):
    """Featurized stage: labelled feature map."""

    label: Label
    features: dict[str, float]


@dataclass(frozen=True)
class AliasSchema:
    """Ordered accepted spellings for each canonical field.

    Resolved once per dataset against the union of keys seen, so every record
    is read through the same field names.
    """

    aliases: Mapping[str, tuple[str, ...]]

    def resolve(self, keys: Iterable[str]) -> dict[str, str]:
        present = set(keys)
        resolved: dict[str, str] = {}
        for canonical, names in self.aliases.items():
            for name in names:
                if name in present:
                    resolved[canonical] = name
                    break
        return resolved


HC3_SCHEMA = AliasSchema(
    aliases={
        "human": ("human_answers", "humanAnswers", "human", "answers_human", "answersHuman"),
        "ai": (
            "chatgpt_answers",
            "chatgptAnswers",
            "chatgpt",
            "answers_chatgpt",
            "answersChatgpt",
        ),
    },
)


@dataclass
class ConversionResult:
    """Rows produced by a converter plus counters for the operator."""

    rows: list[BaseModel] = field(default_factory=list)
    skipped: int = 0

    def count(self, label: str) -> int:
        return sum(1 for r in self.rows if getattr(r, "label", None) == label)


def parse_label(value: object) -> Label | None:
    label = str(value or "").strip().lower()
    if label == "human":
        return "human"
    if label == "ai":
        return "ai"
    return None


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise DatasetError.missing_file(path) from e
    except (OSError, UnicodeDecodeError) as e:
        raise DatasetError.invalid_argument(f"Cannot read {path}: {e}") from e


def read_jsonl(path: Path) -> list[tuple[int, dict[str, Any]]]:
    """Parse a JSON Lines file into ``(line_no, object)`` pairs.

    Raises:
        DatasetError: If the file is missing or a line is not a JSON object.
    """
    records: list[tuple[int, dict[str, Any]]] = []
    for line_no, line in enumerate(read_text(path).splitlines(), start=1):
        stripped = line.strip()
        if not stripped:
            continue
        try:
            obj = json.loads(stripped)
        except json.JSONDecodeError as e:
            raise DatasetError.malformed_row(line_no, e.msg) from e
        if not isinstance(obj, dict):
            raise DatasetError.malformed_row(line_no, "expected a JSON object")
        records.append((line_no, obj))
    return records


def read_json_records(path: Path) -> list[tuple[int, dict[str, Any]]]:
    """Read either a JSON array of objects or JSON Lines."""
    raw = read_text(path)
    if not raw.strip().startswith("["):
        return read_jsonl(path)
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DatasetError.malformed_row(e.lineno, e.msg) from e
    if not isinstance(parsed, list):
        raise DatasetError.malformed_row(1, "expected a JSON array")
    return [(i, obj) for i, obj in enumerate(parsed, start=1) if isinstance(obj, dict)]


def write_jsonl(path: Path, rows: Sequence[BaseModel]) -> None:
    """Write rows atomically, one compact JSON object per line."""
    body = "".join(row.model_dump_json() + "\n" for row in rows)
    atomic_write_text(path, body)


def _limit_reached(rows: Sequence[object], limit: int | None) -> bool:
    return limit is not None and limit > 0 and len(rows) >= limit


def convert_grid_csv(
    path: Path,
    *,
    text_col: str = "Data",
    label_col: str = "Label",
    limit: int | None = None,
) -> ConversionResult:
    """Convert a GRiD-style CSV (label 0 = human, 1 = GPT) to raw rows.

    Raises:
        DatasetError: If the CSV is empty or lacks the text/label columns.
    """
    raw = read_text(path)
    reader = csv.DictReader(io.StringIO(raw))
    headers = [h.strip() for h in (reader.fieldnames or [])]
    if not headers:
        raise DatasetError.empty(path)
    if text_col not in headers or label_col not in headers:
        raise DatasetError.missing_columns([text_col, label_col], headers)
    reader.fieldnames = headers

    result = ConversionResult()
    for record in reader:
        text = str(record.get(text_col) or "").strip()
        label_raw = str(record.get(label_col) or "").strip()
        label = {"0": "human", "1": "ai"}.get(label_raw)
        if not text or label is None:
            result.skipped += 1
            continue
        result.rows.append(RawRow(label=label, text=text))
        if _limit_reached(result.rows, limit):
            break
    return result


def _text_list(value: object, max_per_record: int | None) -> list[str]:
    if isinstance(value, str):
        items = [value]
    elif isinstance(value, list):
        items = ["" if v is None else str(v) for v in value]
    else:
        items = []
    items = [s for s in items if s.strip()]
    if max_per_record is not None and max_per_record > 0:
        items = items[:max_per_record]
    return items


def convert_hc3(
    path: Path,
    *,
    limit: int | None = None,
    max_per_record: int | None = None,
) -> ConversionResult:
    """Convert an HC3-style export (JSON array or JSONL) to raw rows.

    Records already in the raw schema pass through unchanged.
    """
    records = [obj for _, obj in read_json_records(path)]
    fields = HC3_SCHEMA.resolve(key for obj in records for key in obj)
    log.debug("hc3_fields_resolved", fields=fields)

    result = ConversionResult()
    for obj in records:
        existing = parse_label(obj.get("label"))
        if existing is not None and isinstance(obj.get("text"), str):
            text = obj["text"].strip()
            if text:
                result.rows.append(RawRow(label=existing, text=text))
            else:
                result.skipped += 1
            if _limit_reached(result.rows, limit):
                break
            continue

        for label in LABELS:
            name = fields.get(label)
            texts = _text_list(obj.get(name), max_per_record) if name else []
            for text in texts:
                result.rows.append(RawRow(label=label, text=text))
                if _limit_reached(result.rows, limit):
                    return result
    return result


_UI_JUNK_PATTERNS = (
    re.compile(r"\b\d+\s*(?:h|hr|hrs|hour|hours|d|day|days|w|week|weeks)\s+ago\b", re.IGNORECASE),
    re.compile(r"\b\d+\s+more\s+repl(?:y|ies)\b", re.IGNORECASE),
)


def looks_like_ui_junk(text: str) -> bool:
    """Detect captured page chrome instead of a message body."""
    stripped = text.strip()
    if not stripped or stripped in {"[deleted]", "[removed]"}:
        return True
    if "\n•\n" in text:
        return True
    return any(p.search(text) for p in _UI_JUNK_PATTERNS)


def _extract_json_object(line: str) -> dict[str, Any] | None:
    """Pull the first ``{...}`` blob out of a console-pasted line."""
    start, end = line.find("{"), line.rfind("}")
    if start < 0 or end <= start:
        return None
    try:
        obj = json.loads(line[start : end + 1])
    except json.JSONDecodeError:
        return None
    return obj if isinstance(obj, dict) else None


def label_train_dump(
    path: Path,
    *,
    mode: Literal["human", "ai", "model"] = "human",
    model: LinearModel | None = None,
    ai_threshold: float = 0.92,
    human_threshold: float = 0.10,
    min_words: int = 6,
) -> ConversionResult:
    """Label collected ``rss-train-data`` dumps as featurized rows.

    Args:
        path: Dump file; lines may carry trailing console noise.
        mode: Fixed label for every row, or ``"model"`` to pseudo-label.
        model: Model used in ``"model"`` mode.
        ai_threshold: Minimum probability to pseudo-label as AI.
        human_threshold: Maximum probability to pseudo-label as human.
        min_words: Rows with fewer words are skipped.

    Raises:
        DatasetError: If ``mode`` is ``"model"`` and no model is given.
    """
    if mode == "model" and model is None:
        raise DatasetError.invalid_argument("model labelling needs a model")

    result = ConversionResult()
    for line in read_text(path).splitlines():
        row = _extract_json_object(line.strip())
        if row is None or row.get("kind") != TRAIN_DUMP_KIND:
            result.skipped += 1
            continue

        text = str(row.get("text") or "")
        features = normalize_feature_map(row.get("features"))
        words = round(max(0.0, features.get("wordCount", 0.0)) * WORD_COUNT_CAP)
        if looks_like_ui_junk(text) or words < min_words:
            result.skipped += 1
            continue

        if mode != "model":
            label: Label = mode
        else:
            p = predict_proba(model, features)  # type: ignore[arg-type]
            if p >= ai_threshold:
                label = "ai"
            elif p <= human_threshold:
                label = "human"
            else:
                result.skipped += 1
                continue
        result.rows.append(FeaturizedRow(label=label, features=features))
    return result

"""Batch featurizer: raw labelled text to labelled feature maps."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from slopsleuth.features import extract_features, normalize_feature_map
from slopsleuth.training.datasets import ConversionResult, FeaturizedRow, parse_label


def features_for_record(record: dict[str, Any]) -> dict[str, float]:
    """Use precomputed features when present, else extract them from ``text``.

    Precomputed maps let collected dumps carry history/context features that
    raw datasets cannot provide.
    """
    precomputed = record.get("features")
    if isinstance(precomputed, dict):
        return normalize_feature_map(precomputed)
    return extract_features(str(record.get("text") or ""))


def featurize_records(records: Iterable[dict[str, Any]]) -> ConversionResult:
    """Featurize labelled records; rows without a human/ai label are skipped."""
    result = ConversionResult()
    for record in records:
        label = parse_label(record.get("label"))
        if label is None:
            result.skipped += 1
            continue
        result.rows.append(FeaturizedRow(label=label, features=features_for_record(record)))
    return result

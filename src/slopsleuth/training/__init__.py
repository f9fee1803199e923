"""Offline training pipeline: dataset conversion, featurization, training and evaluation."""

from slopsleuth.training.datasets import (
    HC3_SCHEMA,
    TRAIN_DUMP_KIND,
    AliasSchema,
    ConversionResult,
    FeaturizedRow,
    RawRow,
    convert_grid_csv,
    convert_hc3,
    label_train_dump,
    looks_like_ui_junk,
    read_jsonl,
    write_jsonl,
)
from slopsleuth.training.evaluate import (
    EvalResult,
    Example,
    evaluate_at,
    examples_from_records,
    parse_thresholds,
    results_table,
    sweep,
)
from slopsleuth.training.featurize import features_for_record, featurize_records
from slopsleuth.training.trainer import CLI_TRAIN_OPTIONS, samples_from_rows, train_artifact

__all__ = [
    "CLI_TRAIN_OPTIONS",
    "HC3_SCHEMA",
    "TRAIN_DUMP_KIND",
    "AliasSchema",
    "ConversionResult",
    "EvalResult",
    "Example",
    "FeaturizedRow",
    "RawRow",
    "convert_grid_csv",
    "convert_hc3",
    "evaluate_at",
    "examples_from_records",
    "features_for_record",
    "featurize_records",
    "label_train_dump",
    "looks_like_ui_junk",
    "parse_thresholds",
    "read_jsonl",
    "results_table",
    "samples_from_rows",
    "sweep",
    "train_artifact",
    "write_jsonl",
]

"""Heuristic and linear-model detection of bot-like and AI-generated comments."""

from slopsleuth.engine import Entry, EntryReasons, EntryScores, SleuthContext
from slopsleuth.errors import DatasetError, ErrorCode, ModelError, SleuthError
from slopsleuth.features import extract_features
from slopsleuth.heuristic import score_profile, score_text_signals, score_username
from slopsleuth.linear import LinearModel, load_default_model, predict_proba
from slopsleuth.policy import Classification, Kind, Thresholds, classify

__version__ = "0.1.0"

__all__ = [
    "Classification",
    "DatasetError",
    "Entry",
    "EntryReasons",
    "EntryScores",
    "ErrorCode",
    "Kind",
    "LinearModel",
    "ModelError",
    "SleuthContext",
    "SleuthError",
    "Thresholds",
    "classify",
    "extract_features",
    "load_default_model",
    "predict_proba",
    "score_profile",
    "score_text_signals",
    "score_username",
]

"""Rule-based scoring.

Three independent scorers, each returning a score and the reasons behind it:
- username: machine-generated looking account names
- profile: account age, karma and staff status
- text: bot-style replies and AI-style prose, with near-duplicate detection
"""

from slopsleuth.heuristic.history import FingerprintMemo, IdentityHistory
from slopsleuth.heuristic.scorer import (
    fingerprint,
    score_profile,
    score_text_signals,
    score_username,
)
from slopsleuth.heuristic.types import ScoreResult, TextSignals

__all__ = [
    "FingerprintMemo",
    "IdentityHistory",
    "ScoreResult",
    "TextSignals",
    "fingerprint",
    "score_profile",
    "score_text_signals",
    "score_username",
]

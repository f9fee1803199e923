"""Heuristic score types."""

from __future__ import annotations

from pydantic import Field

from sleuth_utils import StrictModel

SCORE_MIN = 0.0
SCORE_MAX = 20.0


class ScoreResult(StrictModel):
    """Rule-derived suspicion level with the reasons that produced it."""

    score: float = 0.0
    reasons: list[str] = Field(default_factory=list)  # in the order rules fired


class TextSignals(StrictModel):
    """Two independent sub-scores computed from the same text."""

    ai: ScoreResult
    bot_text: ScoreResult
    near_duplicate: bool = False

"""Classification policy: three scores in, one discrete label out."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from sleuth_utils import StrictModel

if TYPE_CHECKING:
    from sleuth_utils import Settings


class Kind(StrEnum):
    """Discrete labels, in decision priority order."""

    BOT = "bot"
    AI = "ai"
    HUMAN = "human"
    UNKNOWN = "unknown"


EMOJI: dict[Kind, str] = {
    Kind.BOT: "🤖",
    Kind.AI: "🧠",
    Kind.HUMAN: "✅",
    Kind.UNKNOWN: "❓",
}


@dataclass(frozen=True)
class Thresholds:
    """Decision cutoffs. Tunable constants, not derived from data."""

    bot: float = 7.0
    ai: float = 6.0
    human: float = -2.0

    @classmethod
    def from_settings(cls, settings: Settings) -> Thresholds:
        return cls(
            bot=settings.bot_threshold,
            ai=settings.ai_threshold,
            human=settings.human_threshold,
        )


DEFAULT_THRESHOLDS = Thresholds()


class Classification(StrictModel):
    """Discrete label with its badge emoji."""

    kind: Kind
    emoji: str


def classify(
    bot_score: float,
    ai_score: float,
    profile_score: float,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> Classification:
    """Map scores to a label: bot, then ai, then human, else unknown.

    Total over all inputs; NaN never satisfies a threshold and falls through
    to unknown.
    """
    if bot_score >= thresholds.bot:
        kind = Kind.BOT
    elif ai_score >= thresholds.ai:
        kind = Kind.AI
    elif bot_score + ai_score + profile_score <= thresholds.human:
        kind = Kind.HUMAN
    else:
        kind = Kind.UNKNOWN
    return Classification(kind=kind, emoji=EMOJI[kind])

"""Rule-based scorers for usernames, profiles and comment text.

Each rule adds a fixed increment and records a reason string ending with the
signed increment, e.g. ``"multiple links (+2)"``. Scores are sums of those
increments; text sub-scores are clamped into [SCORE_MIN, SCORE_MAX].
"""

from __future__ import annotations

import re
import time
from collections.abc import MutableMapping
from typing import TYPE_CHECKING

from slopsleuth import text as lex
from slopsleuth.heuristic.types import SCORE_MAX, SCORE_MIN, ScoreResult, TextSignals

if TYPE_CHECKING:
    from slopsleuth.profiles.types import Profile

SECONDS_PER_DAY = 24 * 60 * 60

FINGERPRINT_MAX_CHARS = 600
FINGERPRINT_MIN_CHARS = 24

# AI rules below this many words only look at explicit phrases.
MIN_WORDS_FOR_STYLE = 8

_TRAILING_DIGITS_RE = re.compile(r"\d{4,}$")
_ADJ_NOUN_DIGITS_RE = re.compile(r"^[A-Za-z]+[-_][A-Za-z]+\d{2,4}$")


class _Tally:
    """Accumulates score increments and their reasons in firing order."""

    def __init__(self) -> None:
        self.score = 0.0
        self.reasons: list[str] = []

    def add(self, delta: float, reason: str) -> None:
        self.score += delta
        self.reasons.append(f"{reason} ({delta:+g})")

    def result(self, *, clamp: bool = False) -> ScoreResult:
        score = lex.clamp(self.score, SCORE_MIN, SCORE_MAX) if clamp else self.score
        return ScoreResult(score=score, reasons=self.reasons)


def score_username(username: str | None) -> ScoreResult:
    """Score how machine-generated a username looks.

    Args:
        username: Account name, already stripped of ``u/`` prefixes.

    Returns:
        ScoreResult with a non-negative score.
    """
    name = username or ""
    tally = _Tally()
    if not name:
        return tally.result()

    if "bot" in name.lower():
        tally.add(3, "username contains 'bot'")
    if _TRAILING_DIGITS_RE.search(name):
        tally.add(2, "username ends with many digits")
    if _ADJ_NOUN_DIGITS_RE.match(name):
        tally.add(2, "username matches adjective-noun-digits pattern")

    digits = sum(1 for c in name if c.isdigit())
    if digits and digits / len(name) > 0.35:
        tally.add(1, "high digit ratio")

    return tally.result()


def account_age_days(profile: Profile, now: float | None = None) -> float | None:
    """Days since account creation, or None when the timestamp is unusable."""
    created = profile.created_at_seconds
    if created is None or created <= 0:
        return None
    now = time.time() if now is None else now
    return max(0.0, (now - created) / SECONDS_PER_DAY)


def score_profile(profile: Profile | None, now: float | None = None) -> ScoreResult:
    """Score account reputation. Negative scores indicate an established human.

    Args:
        profile: Fetched profile, or None when unavailable.
        now: Current epoch seconds (defaults to wall clock).

    Returns:
        ScoreResult; zero with no reasons when the profile is missing.
    """
    tally = _Tally()
    if profile is None:
        return tally.result()

    days_old = account_age_days(profile, now)
    if days_old is not None and days_old < 7:
        tally.add(3, "account age < 7d")
    elif days_old is not None and days_old > 365:
        tally.add(-2, "account age > 365d")

    karma = profile.total_karma
    if karma < 50:
        tally.add(2, "total karma < 50")
    elif karma > 2000:
        tally.add(-2, "total karma > 2000")

    if profile.is_employee:
        tally.add(-4, "site employee")

    return tally.result()


def fingerprint(text: str) -> str:
    """Normalize text so reposts with swapped URLs or numbers collide."""
    lowered = lex.bounded(text).lower()
    lowered = lex.URL_RE.sub(" url ", lowered)
    lowered = lex.NUMBER_RE.sub(" num ", lowered)
    lowered = lex.MARKDOWN_PUNCT_RE.sub(" ", lowered)
    return lex.compact_ws(lowered)[:FINGERPRINT_MAX_CHARS]


def _score_ai(raw: str, body: str, words: int) -> ScoreResult:
    tally = _Tally()
    lower = raw.lower()

    if lex.SELF_DISCLOSURE_RE.search(raw):
        tally.add(10, "self-disclosed AI")
    if lex.META_FRAMING_RE.search(raw):
        tally.add(1.5, "meta 'let me analyze' framing")
    if lex.TEMPLATE_PHRASE_RE.search(raw):
        tally.add(1, "template 'signs/indicators of' phrasing")

    if words >= MIN_WORDS_FOR_STYLE:
        hits = lex.transition_hits(lower)
        if hits > 0 and words > 40:
            tally.add(round(lex.clamp(hits * 1.2, 1, 4), 1), f"formulaic transitions x{hits}")

        if words > 60 and len(lex.CONTRACTION_RE.findall(lower)) <= 1:
            tally.add(2, "very low contractions")

        stats = lex.sentence_stats(raw)
        if stats.count >= 4 and stats.mean >= 18 and stats.variance < 10 and words > 80:
            tally.add(2, "long uniform sentences")

        if lex.count_lines(body, lex.LIST_LINE_RE) >= 3 and words > 60:
            tally.add(1.5, "structured list formatting")
        if lex.count_lines(body, lex.HEADING_LINE_RE) >= 6 and words >= 350:
            tally.add(1.5, "heavy markdown sectioning")
        if len(lex.LINK_RE.findall(raw)) >= 6 and words >= 250:
            tally.add(1, "many outbound links in long text")

    if lex.COORDINATES_RE.search(raw):
        tally.add(0.5, "formatted coordinates")
    if lex.EMOJI_RE.search(raw):
        tally.add(-1, "contains emoji")
    if lex.has_casual_marker(raw):
        tally.add(-0.5, "casual/rhetorical markers")

    return tally.result(clamp=True)


def _score_bot_text(
    raw: str,
    words: int,
    history: MutableMapping[str, int] | None,
) -> tuple[ScoreResult, bool]:
    tally = _Tally()

    if lex.is_short_generic_reply(raw.lower(), words):
        tally.add(2, "generic very short reply")
    if lex.SUSPICIOUS_TLD_RE.search(raw):
        tally.add(4, "suspicious TLD in text")
    if len(lex.LINK_RE.findall(raw)) >= 2:
        tally.add(2, "multiple links")

    duplicate = False
    if history is not None:
        fp = fingerprint(raw)
        if len(fp) >= FINGERPRINT_MIN_CHARS:
            seen = history.get(fp, 0)
            if seen >= 1:
                duplicate = True
                tally.add(2, "repeated near-duplicate message by same user")
            history[fp] = seen + 1

    return tally.result(clamp=True), duplicate


def score_text_signals(
    text: str | None,
    history: MutableMapping[str, int] | None = None,
) -> TextSignals:
    """Compute the AI-style and bot-text sub-scores for one message.

    Args:
        text: Comment or post body.
        history: Fingerprint -> count memo for the author. Mutated in place:
            the fingerprint count is incremented whether or not it matched.

    Returns:
        TextSignals with both sub-scores clamped to [0, 20].
    """
    body = lex.bounded(text)
    raw = lex.compact_ws(body)
    words = len(lex.split_words(raw))

    bot_text, duplicate = _score_bot_text(raw, words, history)
    return TextSignals(
        ai=_score_ai(raw, body, words),
        bot_text=bot_text,
        near_duplicate=duplicate,
    )

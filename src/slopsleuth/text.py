"""Lexical helpers shared by the feature extractor and the heuristic scorers.

Everything here is pure and bounded: callers truncate input to
``MAX_SCAN_CHARS`` before scanning so regex work stays linear in the cap.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

MAX_SCAN_CHARS = 20_000

WHITESPACE_RE = re.compile(r"\s+")
LINK_RE = re.compile(r"https?://", re.IGNORECASE)
URL_RE = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
NUMBER_RE = re.compile(r"\d+(?:[.,]\d+)*")
SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
SUSPICIOUS_TLD_RE = re.compile(
    r"\.(?:xyz|top|click|buzz|live|shop|online|site|store)\b",
    re.IGNORECASE,
)
LIST_LINE_RE = re.compile(r"^\s*(?:[-*+]\s+|\d+[.)]\s*)")
HEADING_LINE_RE = re.compile(r"^\s*#{1,6}\s+\S")
BOLD_RE = re.compile(r"\*\*[^*\n]+\*\*|__[^_\n]+__")
CODE_SPAN_RE = re.compile(r"`[^`\n]+`")
EMOJI_RE = re.compile(
    "[\U0001f300-\U0001faff\U0001f000-\U0001f2ff☀-➿⭐⭕]",
)
COORDINATES_RE = re.compile(
    r"-?\d{1,2}\.\d{3,}\s*,\s*-?\d{1,3}\.\d{3,}"
    r"|\d{1,3}\s*°\s*\d{1,2}\s*['′]\s*(?:\d{1,2}(?:\.\d+)?\s*[\"″]\s*)?[NSEW]",
    re.IGNORECASE,
)
_CONTRACTIONS = (
    "i'm i've i'd i'll you're you've we're we've they're they've "
    "can't won't don't doesn't didn't isn't aren't wasn't weren't "
    "couldn't shouldn't wouldn't haven't hasn't it's that's there's what's let's"
).split()
# Accept both straight and typographic apostrophes.
CONTRACTION_RE = re.compile(
    r"\b(?:" + "|".join(c.replace("'", "['’]") for c in _CONTRACTIONS) + r")\b",
    re.IGNORECASE,
)
FIRST_PERSON_RE = re.compile(r"\b(?:i|me|my|mine|myself)\b", re.IGNORECASE)

SELF_DISCLOSURE_RE = re.compile(
    r"\bas an ai\b|\bas a (?:large )?language model\b|\bas an ai language model\b"
    r"|\bi (?:cannot|can ?not|can't) (?:assist|help)\b",
    re.IGNORECASE,
)
META_FRAMING_RE = re.compile(
    r"\blet me (?:analy[sz]e|break (?:this |it )?down|break down)\b"
    r"|\blet's break (?:this |it )?down\b"
    r"|\b(?:d[eé]jame|perm[ií]teme|voy a) (?:analizar|desglosar)\b"
    r"|\b(?:analicemos|desglosemos)\b",
    re.IGNORECASE,
)
TEMPLATE_PHRASE_RE = re.compile(
    r"\b(?:signs|indicators|hallmarks|evidence) (?:of|that)\b",
    re.IGNORECASE,
)
CASUAL_MARKER_RE = re.compile(
    r"\b(?:lol|lmao|lmfao|rofl|tbh|imo|imho|idk|smh|ngl|haha+|jaja+|jeje+|xd)\b",
    re.IGNORECASE,
)

TRANSITION_PHRASES = (
    "in conclusion",
    "in summary",
    "furthermore",
    "moreover",
    "additionally",
    "it is important to note",
    "it's worth noting",
    "overall",
    "ultimately",
)

SHORT_GENERIC_REPLIES = frozenset(
    {
        "lol",
        "nice",
        "this",
        "this.",
        "agreed",
        "same",
        "true",
        "exactly",
        "thanks",
        "based",
        "facts",
    },
)

MARKDOWN_PUNCT_RE = re.compile(r"[*_`#>~|\[\](){}]")

IDENTITY_PREFIX_RE = re.compile(r"^(?:/?u/|@)", re.IGNORECASE)


@dataclass(frozen=True)
class SentenceStats:
    """Word-count statistics over sentences."""

    count: int
    mean: float
    variance: float


def bounded(text: object) -> str:
    """Coerce any input to a string capped at ``MAX_SCAN_CHARS``."""
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)
    return text[:MAX_SCAN_CHARS]


def compact_ws(text: str) -> str:
    """Collapse all whitespace runs into single spaces."""
    return WHITESPACE_RE.sub(" ", text).strip()


def split_words(text: str) -> list[str]:
    return [w for w in WHITESPACE_RE.split(text) if w]


def sentence_stats(text: str) -> SentenceStats:
    """Compute mean and population variance of words per sentence."""
    sentences = [compact_ws(s) for s in SENTENCE_SPLIT_RE.split(text)]
    lengths = [len(split_words(s)) for s in sentences if s]
    if not lengths:
        return SentenceStats(count=0, mean=0.0, variance=0.0)
    mean = sum(lengths) / len(lengths)
    variance = sum((n - mean) ** 2 for n in lengths) / len(lengths)
    return SentenceStats(count=len(lengths), mean=mean, variance=variance)


def count_lines(text: str, pattern: re.Pattern[str]) -> int:
    return sum(1 for line in text.splitlines() if pattern.match(line))


def transition_hits(lower: str) -> int:
    """Count distinct formulaic transition phrases present in lower-cased text."""
    return sum(1 for phrase in TRANSITION_PHRASES if phrase in lower)


def has_casual_marker(raw: str) -> bool:
    return raw.rstrip().endswith("?") or CASUAL_MARKER_RE.search(raw) is not None


def is_short_generic_reply(lower: str, word_count: int) -> bool:
    if word_count == 0 or word_count > 3:
        return False
    return re.sub(r"[^a-z.]", "", lower) in SHORT_GENERIC_REPLIES


def normalize_identity(raw: object) -> str:
    """Strip ``u/``, ``/u/`` and ``@`` prefixes and surrounding whitespace."""
    if raw is None:
        return ""
    return IDENTITY_PREFIX_RE.sub("", str(raw).strip()).strip()


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))

"""Engineered feature extraction for the linear model.

Every feature is divided by a fixed cap and clipped into [0, 1] so a linear
combination stays well-scaled across short replies and long posts alike.
The key set is a versioned vocabulary; models trained on one version must be
served with the same extractor.
"""

from __future__ import annotations

import math

from slopsleuth import text as lex

FEATURE_VERSION = "rss-features-v1"

# Feature name -> divisor applied before clipping into [0, 1].
FEATURE_CAPS: dict[str, float] = {
    "wordCount": 600.0,
    "charCount": 4000.0,
    "avgWordLength": 12.0,
    "sentenceCount": 40.0,
    "sentenceLengthMean": 40.0,
    "sentenceLengthStd": 20.0,
    "punctuationRatio": 0.2,
    "commaRate": 0.2,
    "exclamationRate": 0.1,
    "questionRate": 0.1,
    "uppercaseRatio": 0.5,
    "digitRatio": 0.3,
    "newlineRate": 0.2,
    "linkCount": 10.0,
    "hasLink": 1.0,
    "headingCount": 10.0,
    "hasHeading": 1.0,
    "listLineCount": 10.0,
    "hasList": 1.0,
    "boldCount": 10.0,
    "codeSpanCount": 10.0,
    "contractionRate": 0.1,
    "hasEmoji": 1.0,
    "emojiCount": 10.0,
    "casualMarker": 1.0,
    "selfDisclosure": 1.0,
    "metaDiscourse": 1.0,
    "templatePhrase": 1.0,
    "transitionCount": float(len(lex.TRANSITION_PHRASES)),
    "firstPersonRate": 0.15,
    "hasCoordinates": 1.0,
    "suspiciousTld": 1.0,
    "shortGenericReply": 1.0,
}

FEATURE_NAMES: tuple[str, ...] = tuple(FEATURE_CAPS)

_PUNCTUATION = frozenset(".,;:!?\"'()[]{}-…")


def _scaled(name: str, value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return lex.clamp(value / FEATURE_CAPS[name], 0.0, 1.0)


def _ratio(count: int, total: int) -> float:
    return count / total if total else 0.0


def extract_features(text: object) -> dict[str, float]:
    """Map raw text to the engineered feature vocabulary.

    Total over any input: ``None``, non-strings, empty strings and lone
    surrogates all produce a complete, finite map.

    Args:
        text: Comment or post body.

    Returns:
        Dict with exactly the keys in ``FEATURE_NAMES``.
    """
    body = lex.bounded(text)
    raw = lex.compact_ws(body)
    lower = raw.lower()
    words = lex.split_words(raw)
    n_words = len(words)
    n_chars = len(raw)
    stats = lex.sentence_stats(raw)

    links = len(lex.LINK_RE.findall(raw))
    headings = lex.count_lines(body, lex.HEADING_LINE_RE)
    list_lines = lex.count_lines(body, lex.LIST_LINE_RE)
    emojis = len(lex.EMOJI_RE.findall(raw))
    letters = [c for c in raw if c.isalpha()]

    values: dict[str, float] = {
        "wordCount": n_words,
        "charCount": n_chars,
        "avgWordLength": _ratio(sum(len(w) for w in words), n_words),
        "sentenceCount": stats.count,
        "sentenceLengthMean": stats.mean,
        "sentenceLengthStd": math.sqrt(stats.variance),
        "punctuationRatio": _ratio(sum(1 for c in raw if c in _PUNCTUATION), n_chars),
        "commaRate": _ratio(raw.count(","), n_words),
        "exclamationRate": _ratio(raw.count("!"), n_words),
        "questionRate": _ratio(raw.count("?"), n_words),
        "uppercaseRatio": _ratio(sum(1 for c in letters if c.isupper()), len(letters)),
        "digitRatio": _ratio(sum(1 for c in raw if c.isdigit()), n_chars),
        "newlineRate": _ratio(body.count("\n"), n_words),
        "linkCount": links,
        "hasLink": float(links > 0),
        "headingCount": headings,
        "hasHeading": float(headings > 0),
        "listLineCount": list_lines,
        "hasList": float(list_lines > 0),
        "boldCount": len(lex.BOLD_RE.findall(raw)),
        "codeSpanCount": len(lex.CODE_SPAN_RE.findall(raw)),
        "contractionRate": _ratio(len(lex.CONTRACTION_RE.findall(lower)), n_words),
        "hasEmoji": float(emojis > 0),
        "emojiCount": emojis,
        "casualMarker": float(lex.has_casual_marker(raw)),
        "selfDisclosure": float(lex.SELF_DISCLOSURE_RE.search(raw) is not None),
        "metaDiscourse": float(lex.META_FRAMING_RE.search(raw) is not None),
        "templatePhrase": float(lex.TEMPLATE_PHRASE_RE.search(raw) is not None),
        "transitionCount": lex.transition_hits(lower),
        "firstPersonRate": _ratio(len(lex.FIRST_PERSON_RE.findall(lower)), n_words),
        "hasCoordinates": float(lex.COORDINATES_RE.search(raw) is not None),
        "suspiciousTld": float(lex.SUSPICIOUS_TLD_RE.search(raw) is not None),
        "shortGenericReply": float(lex.is_short_generic_reply(lower, n_words)),
    }

    return {name: _scaled(name, float(values[name])) for name in FEATURE_NAMES}


def normalize_feature_map(raw: object) -> dict[str, float]:
    """Coerce an untrusted feature mapping into finite floats.

    Booleans become 0/1, anything non-numeric or non-finite becomes 0.
    Non-mapping input yields an empty map.
    """
    if not isinstance(raw, dict):
        return {}
    out: dict[str, float] = {}
    for key, value in raw.items():
        if isinstance(value, bool):
            number = 1.0 if value else 0.0
        else:
            try:
                number = float(value)
            except (TypeError, ValueError):
                number = 0.0
        out[str(key)] = number if math.isfinite(number) else 0.0
    return out

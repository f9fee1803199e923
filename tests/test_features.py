"""Tests for feature extraction."""

from __future__ import annotations

import math

import pytest

from slopsleuth.features import FEATURE_NAMES, extract_features, normalize_feature_map


class TestExtractFeatures:
    """Tests for extract_features function."""

    @pytest.mark.parametrize(
        "text",
        [None, "", "   ", 12345, "\ud800 lone surrogate", "x" * 50_000, "lol"],
        ids=["none", "empty", "blank", "int", "surrogate", "huge", "short"],
    )
    def test_total_and_bounded(self, text: object) -> None:
        """Test every input yields the full vocabulary with values in [0, 1]."""
        features = extract_features(text)

        assert tuple(features) == FEATURE_NAMES
        assert all(math.isfinite(v) and 0.0 <= v <= 1.0 for v in features.values())

    def test_idempotent(self) -> None:
        """Test the same text always maps to the same features."""
        text = "Furthermore, check https://example.com. It's fine, isn't it?"

        assert extract_features(text) == extract_features(text)

    def test_word_count_scaled(self) -> None:
        """Test word count is divided by its cap."""
        assert extract_features("one two three")["wordCount"] == pytest.approx(3 / 600)

    def test_link_and_tld_flags(self) -> None:
        """Test link and suspicious TLD detection."""
        features = extract_features("grab it at https://deals.xyz/now")

        assert features["hasLink"] == 1.0
        assert features["suspiciousTld"] == 1.0
        assert features["linkCount"] == pytest.approx(0.1)

    def test_short_generic_reply(self) -> None:
        """Test short generic replies and casual markers are flagged."""
        features = extract_features("lol")

        assert features["shortGenericReply"] == 1.0
        assert features["casualMarker"] == 1.0

    def test_self_disclosure(self) -> None:
        """Test AI self-disclosure phrasing is flagged."""
        features = extract_features("As an AI language model I can help you with this.")

        assert features["selfDisclosure"] == 1.0

    def test_markdown_structure(self) -> None:
        """Test headings and list lines are counted per line."""
        text = "# Title\n\n- one\n- two\n- three\n\n**bold** and `code`"
        features = extract_features(text)

        assert features["hasHeading"] == 1.0
        assert features["hasList"] == 1.0
        assert features["listLineCount"] == pytest.approx(0.3)
        assert features["boldCount"] > 0
        assert features["codeSpanCount"] > 0

    def test_typographic_apostrophe_contraction(self) -> None:
        """Test contractions with curly apostrophes are counted."""
        assert extract_features("I don’t know")["contractionRate"] > 0


class TestNormalizeFeatureMap:
    """Tests for normalize_feature_map function."""

    def test_coerces_values(self) -> None:
        """Test booleans, strings and non-finite values are coerced."""
        raw = {"a": True, "b": "nope", "c": float("nan"), "d": 2, "e": "0.5", "f": None}

        assert normalize_feature_map(raw) == {
            "a": 1.0,
            "b": 0.0,
            "c": 0.0,
            "d": 2.0,
            "e": 0.5,
            "f": 0.0,
        }

    def test_non_mapping(self) -> None:
        """Test non-dict input yields an empty map."""
        assert normalize_feature_map(["a", 1]) == {}
        assert normalize_feature_map(None) == {}

"""Tests for the classification policy."""

from __future__ import annotations

import math

import pytest

from sleuth_utils import Settings
from slopsleuth.policy import EMOJI, Kind, Thresholds, classify


class TestClassify:
    """Tests for classify function."""

    def test_established_human(self) -> None:
        """Test a strongly negative profile score reads as human."""
        assert classify(0, 0, -4).kind == "human"

    def test_bot_beats_ai(self) -> None:
        """Test bot takes priority over ai when both fire."""
        result = classify(7, 10, 0)

        assert result.kind == Kind.BOT
        assert result.emoji == "🤖"

    def test_ai(self) -> None:
        """Test the AI threshold is inclusive."""
        assert classify(0, 6, 0).kind == Kind.AI

    def test_unknown(self) -> None:
        """Test weak evidence either way yields unknown."""
        result = classify(1, 1, 0)

        assert result.kind == Kind.UNKNOWN
        assert result.emoji == EMOJI[Kind.UNKNOWN]

    def test_human_uses_total(self) -> None:
        """Test the human rule sums all three scores."""
        assert classify(3, 0, -4).kind == Kind.UNKNOWN
        assert classify(1, 1, -4).kind == Kind.HUMAN

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_total_over_non_finite(self, value: float) -> None:
        """Test non-finite input still returns a label."""
        result = classify(value, value, value)

        assert result.kind in set(Kind)

    def test_custom_thresholds(self) -> None:
        """Test thresholds can be tightened."""
        strict = Thresholds(bot=3, ai=2, human=-1)

        assert classify(3, 0, 0, strict).kind == Kind.BOT
        assert classify(0, 2, 0, strict).kind == Kind.AI

    def test_deterministic(self) -> None:
        """Test identical inputs yield identical outputs."""
        assert classify(2, 5, -1) == classify(2, 5, -1)


class TestThresholds:
    """Tests for threshold configuration."""

    def test_from_settings(self) -> None:
        """Test thresholds are read from settings."""
        settings = Settings(bot_threshold=9.0, ai_threshold=4.5, human_threshold=-3.0)

        assert Thresholds.from_settings(settings) == Thresholds(bot=9.0, ai=4.5, human=-3.0)

    def test_defaults(self) -> None:
        """Test the default cutoffs."""
        assert Thresholds() == Thresholds(bot=7.0, ai=6.0, human=-2.0)

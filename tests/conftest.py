"""Pytest fixtures and configuration for slopsleuth tests."""

from __future__ import annotations

import os

# Set environment variables BEFORE any imports that might load settings
# This is necessary because settings are cached on first use
os.environ.setdefault("APP_MODE", "development")
os.environ.setdefault("LOG_LEVEL", "silent")

import pytest
from fakes import FakeClock, FakeSleep


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at a fixed instant."""
    return FakeClock()


@pytest.fixture
def fake_sleep(clock: FakeClock) -> FakeSleep:
    """Sleep that advances the shared fake clock."""
    return FakeSleep(clock)


@pytest.fixture
def sample_rows() -> list[dict[str, str]]:
    """Small labelled raw dataset with clearly separable styles."""
    ai = [
        "As an AI language model, I cannot help with that request. "
        "Furthermore, it is important to note the following considerations.",
        "Let me break this down. In conclusion, there are several indicators of "
        "quality. Moreover, the evidence suggests a structured approach.",
        "Overall, the signs of a robust strategy are clear. Additionally, "
        "it is important to note that careful planning matters.",
    ]
    human = [
        "lol no way that actually happened haha",
        "idk man, I've tried that and it didn't work for me tbh",
        "that's wild, can't believe they'd do that lmao",
    ]
    return [{"label": "ai", "text": t} for t in ai] + [{"label": "human", "text": t} for t in human]

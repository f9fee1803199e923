"""Analysis context: turns (identity, text) into a classified entry.

A ``SleuthContext`` owns every piece of mutable state the scorers need
(profile cache, rate limiter, near-duplicate history, active model), so
several isolated instances can run side by side.
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from pydantic import Field

from sleuth_utils import MutableModel, StrictModel, get_logger, get_settings
from slopsleuth.features import extract_features
from slopsleuth.heuristic import (
    IdentityHistory,
    ScoreResult,
    TextSignals,
    score_profile,
    score_text_signals,
    score_username,
)
from slopsleuth.heuristic.types import SCORE_MAX, SCORE_MIN
from slopsleuth.linear import LinearModel, load_default_model, predict_proba
from slopsleuth.policy import DEFAULT_THRESHOLDS, Classification, Thresholds, classify
from slopsleuth.profiles import (
    CachePolicy,
    FetchFn,
    HttpxFetcher,
    JsonFileStorage,
    KeyValueStorage,
    Profile,
    ProfileCache,
)
from slopsleuth.text import bounded, clamp, normalize_identity

if TYPE_CHECKING:
    from sleuth_utils import Settings

log = get_logger("slopsleuth.engine")


class EntryScores(StrictModel):
    bot: float = 0.0
    ai: float = 0.0
    profile: float = 0.0


class EntryReasons(StrictModel):
    bot: list[str] = Field(default_factory=list)
    ai: list[str] = Field(default_factory=list)
    profile: list[str] = Field(default_factory=list)


class Entry(MutableModel):
    """One observed item with its scores, reasons and label."""

    id: str
    identity: str
    text: str
    scores: EntryScores
    reasons: EntryReasons
    classification: Classification
    model_probability: float | None = None
    name_score: ScoreResult
    text_signals: TextSignals


class SleuthContext:
    """Explicitly constructed scoring state for one running instance."""

    def __init__(
        self,
        profiles: ProfileCache | None = None,
        *,
        thresholds: Thresholds = DEFAULT_THRESHOLDS,
        history: IdentityHistory | None = None,
        model: LinearModel | None = None,
        ml_ai_threshold: float = 0.84,
        ml_ai_bonus: float = 3.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize context.

        Args:
            profiles: Profile cache; profile signals are skipped when None.
            thresholds: Classification cutoffs.
            history: Near-duplicate memory; a default-bounded one when None.
            model: Linear model adding an AI bonus above ``ml_ai_threshold``.
            ml_ai_threshold: Probability at which the model bonus applies.
            ml_ai_bonus: AI score added when the model fires.
            clock: Epoch-seconds clock used for account age.
        """
        self.profiles = profiles
        self.thresholds = thresholds
        self.history = history or IdentityHistory()
        self.ml_ai_threshold = ml_ai_threshold
        self.ml_ai_bonus = ml_ai_bonus
        self.entries: dict[str, Entry] = {}
        self._model = model
        self._clock = clock
        self._ids = itertools.count(1)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        fetch: FetchFn | None = None,
        storage: KeyValueStorage | None = None,
    ) -> SleuthContext:
        """Build a context from application settings.

        Args:
            settings: Settings; the cached instance when None.
            fetch: Network function; an ``HttpxFetcher`` when None.
            storage: Durable storage; a ``JsonFileStorage`` at
                ``profile_cache_path`` when configured, else memory-only.
        """
        settings = settings or get_settings()
        if storage is None and settings.profile_cache_path is not None:
            storage = JsonFileStorage(settings.profile_cache_path)
        profiles = ProfileCache(
            fetch or HttpxFetcher(settings.profile_base_url, user_agent=settings.user_agent),
            storage,
            policy=CachePolicy.from_settings(settings),
        )
        return cls(
            profiles,
            thresholds=Thresholds.from_settings(settings),
            history=IdentityHistory(
                max_identities=settings.history_max_identities,
                max_fingerprints=settings.history_max_fingerprints,
            ),
            model=load_default_model() if settings.use_model else None,
            ml_ai_threshold=settings.ml_ai_threshold,
            ml_ai_bonus=settings.ml_ai_bonus,
        )

    @property
    def model(self) -> LinearModel | None:
        return self._model

    def use_model(self, model: LinearModel | None) -> None:
        """Swap the active model. Call ``recompute_all`` to relabel entries."""
        self._model = model

    def score_text(self, identity: str, text: str) -> TextSignals:
        """Score text and record it in the author's near-duplicate history."""
        memo = self.history.for_identity(identity) if identity else None
        return score_text_signals(text, history=memo)

    async def analyze(self, identity: str, text: str) -> Entry:
        """Score one item and classify it.

        History is updated before the first suspension point, so concurrent
        calls record near-duplicates in the order they were issued.
        """
        key = normalize_identity(identity)
        text = text if isinstance(text, str) else bounded(text)
        signals = self.score_text(key, text)
        entry_id = f"rss-{next(self._ids)}"

        profile = await self._lookup(key)
        entry = self._build(
            entry_id,
            key,
            text,
            name_score=score_username(key),
            signals=signals,
            profile=profile,
        )
        self.entries[entry_id] = entry
        log.debug("entry_classified", entry=entry_id, identity=key, kind=entry.classification.kind)
        return entry

    async def recompute(self, entry: Entry) -> Entry:
        """Relabel an entry with the current model and profile, keeping its text signals."""
        profile = await self._lookup(entry.identity)
        fresh = self._build(
            entry.id,
            entry.identity,
            entry.text,
            name_score=entry.name_score,
            signals=entry.text_signals,
            profile=profile,
        )
        self.entries[entry.id] = fresh
        return fresh

    async def recompute_all(self) -> list[Entry]:
        return [await self.recompute(entry) for entry in list(self.entries.values())]

    async def _lookup(self, identity: str) -> Profile | None:
        if self.profiles is None or not identity:
            return None
        return await self.profiles.get_profile(identity)

    def _build(
        self,
        entry_id: str,
        identity: str,
        text: str,
        *,
        name_score: ScoreResult,
        signals: TextSignals,
        profile: Profile | None,
    ) -> Entry:
        profile_score = score_profile(profile, now=self._clock())

        ai_score = signals.ai.score
        ai_reasons = list(signals.ai.reasons)
        probability = None
        if self._model is not None:
            probability = predict_proba(self._model, extract_features(text))
            if probability >= self.ml_ai_threshold:
                ai_score = clamp(ai_score + self.ml_ai_bonus, SCORE_MIN, SCORE_MAX)
                ai_reasons.append(f"linear model p={probability:.2f} ({self.ml_ai_bonus:+g})")

        bot_score = name_score.score + signals.bot_text.score + profile_score.score
        return Entry(
            id=entry_id,
            identity=identity,
            text=text,
            scores=EntryScores(bot=bot_score, ai=ai_score, profile=profile_score.score),
            reasons=EntryReasons(
                bot=[*name_score.reasons, *signals.bot_text.reasons],
                ai=ai_reasons,
                profile=list(profile_score.reasons),
            ),
            classification=classify(bot_score, ai_score, profile_score.score, self.thresholds),
            model_probability=probability,
            name_score=name_score,
            text_signals=signals,
        )

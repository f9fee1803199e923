"""Profile lookups with durable caching, request spacing and rate-limit backoff.

Lookup order for one identity:
1. durable storage (survives restarts)
2. in-memory entries for this process
3. an in-flight fetch for the same identity (shared, never duplicated)
4. a new fetch, queued behind every other fetch

Failures never reach the caller: they yield ``None`` and are cached briefly.
"""

from __future__ import annotations

import asyncio
import math
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal
from urllib.parse import quote

from pydantic import ValidationError

from sleuth_utils import get_logger
from slopsleuth.profiles.types import CacheEntry, FetchFn, KeyValueStorage, Profile
from slopsleuth.text import normalize_identity

if TYPE_CHECKING:
    from sleuth_utils import Settings

log = get_logger("slopsleuth.profiles.cache")

STORAGE_KEY_PREFIX = "rss:profile:"
RATE_LIMIT_STATUS = 429
RATE_LIMIT_RESET_HEADER = "x-ratelimit-reset"


@dataclass(frozen=True)
class CachePolicy:
    """TTLs and pacing for profile lookups, in seconds."""

    ok_ttl: float = 6 * 60 * 60
    fail_ttl: float = 10 * 60
    min_interval: float = 1.2
    default_backoff: float = 60.0

    @classmethod
    def from_settings(cls, settings: Settings) -> CachePolicy:
        return cls(
            ok_ttl=settings.profile_ok_ttl,
            fail_ttl=settings.profile_fail_ttl,
            min_interval=settings.profile_min_interval,
            default_backoff=settings.rate_limit_backoff,
        )


def profile_url(identity: str) -> str:
    return f"/user/{quote(identity, safe='')}/about.json"


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        for key, candidate in headers.items():
            if key.lower() == name:
                return candidate
    return value


class ProfileCache:
    """Memoized, rate-limited profile lookups for one running instance."""

    def __init__(
        self,
        fetch: FetchFn,
        storage: KeyValueStorage | None = None,
        *,
        policy: CachePolicy | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize cache.

        Args:
            fetch: Async network function returning a FetchResponse.
            storage: Durable storage; memory-only when None.
            policy: TTLs and pacing; defaults to ``CachePolicy()``.
            clock: Epoch-seconds clock.
            sleep: Coroutine used to wait out the minimum interval.
        """
        self._fetch = fetch
        self._storage = storage
        self._policy = policy or CachePolicy()
        self._clock = clock
        self._sleep = sleep
        self._memory: dict[str, CacheEntry] = {}
        self._inflight: dict[str, asyncio.Future[Profile | None]] = {}
        self._queue = asyncio.Lock()
        self._next_fetch_at = 0.0
        self._backoff_until = 0.0
        self.network_calls = 0

    @property
    def policy(self) -> CachePolicy:
        return self._policy

    @property
    def backoff_until(self) -> float:
        return self._backoff_until

    @property
    def storage_enabled(self) -> bool:
        return self._storage is not None

    def is_backing_off(self) -> bool:
        return self._clock() < self._backoff_until

    async def get_profile(self, identity: str) -> Profile | None:
        """Return the profile for an identity, or None when unavailable.

        Never raises. Concurrent calls for one identity share a single fetch.
        """
        key = normalize_identity(identity)
        if not key:
            return None

        entry = self._read_durable(key)
        if entry is None:
            entry = self._fresh(self._memory.get(key))
        if entry is not None:
            return entry.data if entry.status == "ok" else None

        inflight = self._inflight.get(key)
        if inflight is not None:
            return await asyncio.shield(inflight)

        if self.is_backing_off():
            log.debug("profile_lookup_suppressed", identity=key, until=self._backoff_until)
            return None

        task = asyncio.ensure_future(self._queued_fetch(key))
        self._inflight[key] = task
        task.add_done_callback(lambda _: self._inflight.pop(key, None))
        return await asyncio.shield(task)

    def _fresh(self, entry: CacheEntry | None) -> CacheEntry | None:
        if entry is None:
            return None
        ttl = self._policy.ok_ttl if entry.status == "ok" else self._policy.fail_ttl
        age = self._clock() - entry.fetched_at
        return entry if 0 <= age < ttl else None

    def _read_durable(self, key: str) -> CacheEntry | None:
        if self._storage is None:
            return None
        try:
            raw = self._storage.get_item(STORAGE_KEY_PREFIX + key)
        except Exception as e:  # noqa: BLE001 - any backend failure means memory-only
            self._disable_storage("read", e)
            return None
        if raw is None:
            return None
        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError:
            log.debug("cache_entry_corrupt", identity=key)
            return None
        entry = self._fresh(entry)
        if entry is not None:
            self._memory[key] = entry
        return entry

    def _remember(self, key: str, status: Literal["ok", "fail"], data: Profile | None) -> None:
        entry = CacheEntry(status=status, fetched_at=self._clock(), data=data)
        self._memory[key] = entry
        if self._storage is None:
            return
        try:
            self._storage.set_item(STORAGE_KEY_PREFIX + key, entry.model_dump_json(by_alias=True))
        except Exception as e:  # noqa: BLE001 - quota, permissions, unavailable backend
            self._disable_storage("write", e)

    def _disable_storage(self, op: str, error: Exception) -> None:
        log.warning("storage_disabled", op=op, error=str(error))
        self._storage = None

    async def _queued_fetch(self, key: str) -> Profile | None:
        async with self._queue:
            wait = self._next_fetch_at - self._clock()
            if wait > 0:
                await self._sleep(wait)
            # A request ahead of us in the queue may have hit the rate limit.
            if self.is_backing_off():
                return None
            try:
                return await self._request(key)
            finally:
                self._next_fetch_at = self._clock() + self._policy.min_interval

    async def _request(self, key: str) -> Profile | None:
        self.network_calls += 1
        try:
            response = await self._fetch(profile_url(key))
        except Exception as e:  # noqa: BLE001 - injected transport, any failure is a miss
            log.warning("profile_fetch_failed", identity=key, error=str(e))
            self._remember(key, "fail", None)
            return None

        if response.status == RATE_LIMIT_STATUS:
            delay = self._backoff_delay(response.headers)
            self._backoff_until = self._clock() + delay
            log.warning("rate_limited", identity=key, backoff_seconds=delay)
            return None

        if not response.ok:
            log.info("profile_fetch_rejected", identity=key, status=response.status)
            self._remember(key, "fail", None)
            return None

        try:
            profile = self._parse(response.json())
        except (ValueError, TypeError) as e:
            log.info("profile_payload_invalid", identity=key, error=str(e))
            self._remember(key, "fail", None)
            return None

        self._remember(key, "ok", profile)
        log.debug("profile_fetched", identity=key)
        return profile

    @staticmethod
    def _parse(payload: object) -> Profile:
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise ValueError("payload has no 'data' object")
        return Profile.model_validate(data)

    def _backoff_delay(self, headers: Mapping[str, str]) -> float:
        raw = _header(headers, RATE_LIMIT_RESET_HEADER)
        try:
            seconds = float(raw) if raw is not None else math.nan
        except ValueError:
            seconds = math.nan
        if not math.isfinite(seconds) or seconds <= 0:
            return self._policy.default_backoff
        return seconds

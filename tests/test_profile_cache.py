"""Tests for profile lookups: caching, pacing, backoff and storage."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest
from fakes import DAY, NOW, FakeClock, FakeFetch, FakeSleep, about_response, rate_limited

from slopsleuth.profiles import (
    CacheEntry,
    CachePolicy,
    FetchResponse,
    HttpxFetcher,
    JsonFileStorage,
    MemoryStorage,
    Profile,
    ProfileCache,
    profile_url,
)
from slopsleuth.profiles.cache import STORAGE_KEY_PREFIX


class BrokenStorage:
    """Storage whose every operation fails."""

    def get_item(self, key: str) -> str | None:
        raise OSError("storage unavailable")

    def set_item(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


class ReadOnlyStorage(MemoryStorage):
    """Storage that reads fine but rejects writes."""

    def set_item(self, key: str, value: str) -> None:
        raise PermissionError("read-only")


def make_cache(
    fetch: FakeFetch,
    clock: FakeClock,
    sleep: FakeSleep,
    storage: object | None = None,
) -> ProfileCache:
    return ProfileCache(fetch, storage, clock=clock, sleep=sleep)  # type: ignore[arg-type]


class TestProfileUrl:
    """Tests for profile_url function."""

    def test_quotes_identity(self) -> None:
        """Test identities are path-escaped."""
        assert profile_url("some user") == "/user/some%20user/about.json"


class TestGetProfile:
    """Tests for ProfileCache.get_profile."""

    def test_fetch_and_parse(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test a successful fetch returns the parsed profile."""
        fetch = FakeFetch(default=about_response(comment_karma=10, link_karma=5))

        async def scenario() -> Profile | None:
            cache = make_cache(fetch, clock, fake_sleep)
            return await cache.get_profile("u/alice")

        profile = asyncio.run(scenario())

        assert profile is not None
        assert profile.total_karma == 15
        assert fetch.calls == ["/user/alice/about.json"]

    def test_concurrent_lookups_share_one_fetch(
        self,
        clock: FakeClock,
        fake_sleep: FakeSleep,
    ) -> None:
        """Test two concurrent lookups of one identity make one network call."""
        fetch = FakeFetch(default=about_response())

        async def scenario() -> tuple[list[Profile | None], ProfileCache]:
            cache = make_cache(fetch, clock, fake_sleep)
            results = await asyncio.gather(
                cache.get_profile("alice"),
                cache.get_profile("@alice"),
            )
            return list(results), cache

        (first, second), cache = asyncio.run(scenario())

        assert len(fetch.calls) == 1
        assert cache.network_calls == 1
        assert first is not None
        assert first == second

    def test_memory_hit(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test a fresh entry is served without another call."""
        fetch = FakeFetch(default=about_response())

        async def scenario() -> None:
            cache = make_cache(fetch, clock, fake_sleep)
            await cache.get_profile("alice")
            clock.advance(60)
            await cache.get_profile("alice")

        asyncio.run(scenario())

        assert len(fetch.calls) == 1

    def test_ok_entry_expires(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test profiles are refetched after the success TTL."""
        fetch = FakeFetch(default=about_response())

        async def scenario() -> None:
            cache = make_cache(fetch, clock, fake_sleep)
            await cache.get_profile("alice")
            clock.advance(CachePolicy().ok_ttl + 1)
            await cache.get_profile("alice")

        asyncio.run(scenario())

        assert len(fetch.calls) == 2

    def test_empty_identity(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test a blank identity never reaches the network."""
        fetch = FakeFetch(default=about_response())

        async def scenario() -> Profile | None:
            return await make_cache(fetch, clock, fake_sleep).get_profile("  u/ ")

        assert asyncio.run(scenario()) is None
        assert fetch.calls == []


class TestFailures:
    """Tests for failure caching."""

    @pytest.mark.parametrize(
        "outcome",
        [
            httpx.ConnectError("connection refused"),
            FetchResponse(ok=False, status=404),
            FetchResponse(ok=True, status=200, body={"error": "no data"}),
            FetchResponse(ok=True, status=200, body={"data": {"comment_karma": "lots"}}),
            FetchResponse(ok=True, status=200, body=None),
        ],
        ids=["transport-error", "not-found", "no-data", "bad-field", "non-json"],
    )
    def test_failure_cached_briefly(
        self,
        outcome: FetchResponse | Exception,
        clock: FakeClock,
        fake_sleep: FakeSleep,
    ) -> None:
        """Test failures return None and are retried only after the fail TTL."""
        fetch = FakeFetch([outcome], default=about_response())

        async def scenario() -> list[Profile | None]:
            cache = make_cache(fetch, clock, fake_sleep)
            results = [await cache.get_profile("alice")]
            clock.advance(60)
            results.append(await cache.get_profile("alice"))
            clock.advance(CachePolicy().fail_ttl)
            results.append(await cache.get_profile("alice"))
            return results

        first, cached, retried = asyncio.run(scenario())

        assert first is None
        assert cached is None
        assert retried is not None
        assert len(fetch.calls) == 2


class TestRateLimit:
    """Tests for rate-limit backoff."""

    def test_backoff_suppresses_calls(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test a 429 stops all lookups until the reset header elapses."""
        fetch = FakeFetch([rate_limited("30")], default=about_response())

        async def scenario() -> tuple[list[Profile | None], ProfileCache]:
            cache = make_cache(fetch, clock, fake_sleep)
            results = [await cache.get_profile("alice"), await cache.get_profile("bob")]
            assert cache.is_backing_off()
            assert cache.backoff_until == pytest.approx(NOW + 30)
            clock.advance(31)
            results.append(await cache.get_profile("bob"))
            return results, cache

        (first, suppressed, after), cache = asyncio.run(scenario())

        assert first is None
        assert suppressed is None
        assert after is not None
        assert len(fetch.calls) == 2
        assert not cache.is_backing_off()

    def test_default_backoff(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test a missing or garbage reset header falls back to the default."""
        fetch = FakeFetch([rate_limited("soon")], default=about_response())

        async def scenario() -> ProfileCache:
            cache = make_cache(fetch, clock, fake_sleep)
            await cache.get_profile("alice")
            return cache

        cache = asyncio.run(scenario())

        assert cache.backoff_until == pytest.approx(NOW + 60)

    def test_rate_limit_not_cached_as_failure(
        self,
        clock: FakeClock,
        fake_sleep: FakeSleep,
    ) -> None:
        """Test the throttled identity is retried as soon as backoff ends."""
        fetch = FakeFetch([rate_limited()], default=about_response())

        async def scenario() -> Profile | None:
            cache = make_cache(fetch, clock, fake_sleep)
            await cache.get_profile("alice")
            clock.advance(61)
            return await cache.get_profile("alice")

        assert asyncio.run(scenario()) is not None
        assert len(fetch.calls) == 2

    def test_queued_requests_dropped_after_rate_limit(
        self,
        clock: FakeClock,
        fake_sleep: FakeSleep,
    ) -> None:
        """Test fetches already queued behind a 429 are not sent."""
        fetch = FakeFetch([rate_limited("30")], default=about_response())

        async def scenario() -> list[Profile | None]:
            cache = make_cache(fetch, clock, fake_sleep)
            return list(
                await asyncio.gather(cache.get_profile("alice"), cache.get_profile("bob")),
            )

        assert asyncio.run(scenario()) == [None, None]
        assert len(fetch.calls) == 1


class TestPacing:
    """Tests for the minimum interval between requests."""

    def test_requests_spaced(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test consecutive fetches wait out the minimum interval."""
        fetch = FakeFetch(default=about_response())

        async def scenario() -> None:
            cache = make_cache(fetch, clock, fake_sleep)
            await asyncio.gather(
                cache.get_profile("alice"),
                cache.get_profile("bob"),
                cache.get_profile("carol"),
            )

        asyncio.run(scenario())

        assert len(fetch.calls) == 3
        assert fake_sleep.waits == [pytest.approx(1.2), pytest.approx(1.2)]


class TestDurableStorage:
    """Tests for the durable storage layer."""

    def test_fresh_stored_entry_used(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test a stored entry avoids the network entirely."""
        entry = CacheEntry(
            status="ok",
            fetched_at=NOW - 60,
            data=Profile(created_utc=NOW - 30 * DAY, comment_karma=7),
        )
        storage = MemoryStorage(
            {STORAGE_KEY_PREFIX + "alice": entry.model_dump_json(by_alias=True)},
        )
        fetch = FakeFetch(default=about_response())

        async def scenario() -> Profile | None:
            return await make_cache(fetch, clock, fake_sleep, storage).get_profile("alice")

        profile = asyncio.run(scenario())

        assert profile is not None
        assert profile.comment_karma == 7
        assert fetch.calls == []

    def test_stored_failure_used(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test a recent stored failure is honoured across restarts."""
        entry = CacheEntry(status="fail", fetched_at=NOW - 60)
        storage = MemoryStorage(
            {STORAGE_KEY_PREFIX + "alice": entry.model_dump_json(by_alias=True)},
        )
        fetch = FakeFetch(default=about_response())

        async def scenario() -> Profile | None:
            return await make_cache(fetch, clock, fake_sleep, storage).get_profile("alice")

        assert asyncio.run(scenario()) is None
        assert fetch.calls == []

    def test_fetch_persisted(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test fetched profiles are written under the key prefix."""
        storage = MemoryStorage()
        fetch = FakeFetch(default=about_response())

        async def scenario() -> None:
            await make_cache(fetch, clock, fake_sleep, storage).get_profile("alice")

        asyncio.run(scenario())

        stored = json.loads(storage.get_item("rss:profile:alice") or "{}")
        assert stored["status"] == "ok"
        assert stored["fetchedAt"] == NOW
        assert stored["data"]["created_utc"] == NOW - 400 * DAY

    def test_corrupt_entry_refetched(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test unparseable stored values are treated as misses."""
        storage = MemoryStorage({STORAGE_KEY_PREFIX + "alice": "{not json"})
        fetch = FakeFetch(default=about_response())

        async def scenario() -> Profile | None:
            return await make_cache(fetch, clock, fake_sleep, storage).get_profile("alice")

        assert asyncio.run(scenario()) is not None
        assert len(fetch.calls) == 1
        assert json.loads(storage.get_item(STORAGE_KEY_PREFIX + "alice") or "{}")["status"] == "ok"

    def test_broken_storage_degrades(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test a failing backend is dropped and lookups keep working."""
        fetch = FakeFetch(default=about_response())

        async def scenario() -> tuple[Profile | None, ProfileCache]:
            cache = make_cache(fetch, clock, fake_sleep, BrokenStorage())
            return await cache.get_profile("alice"), cache

        profile, cache = asyncio.run(scenario())

        assert profile is not None
        assert not cache.storage_enabled

    def test_write_failure_degrades(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test a write failure keeps the result in memory."""
        fetch = FakeFetch(default=about_response())

        async def scenario() -> tuple[Profile | None, ProfileCache]:
            cache = make_cache(fetch, clock, fake_sleep, ReadOnlyStorage())
            profile = await cache.get_profile("alice")
            await cache.get_profile("alice")
            return profile, cache

        profile, cache = asyncio.run(scenario())

        assert profile is not None
        assert not cache.storage_enabled
        assert len(fetch.calls) == 1


class TestJsonFileStorage:
    """Tests for JsonFileStorage."""

    def test_persists_across_instances(self, tmp_path: Path) -> None:
        """Test values written by one instance are read by the next."""
        path = tmp_path / "cache" / "profiles.json"
        JsonFileStorage(path).set_item("k", "v")

        assert JsonFileStorage(path).get_item("k") == "v"

    def test_corrupt_file_starts_empty(self, tmp_path: Path) -> None:
        """Test a corrupt file is ignored and then overwritten."""
        path = tmp_path / "profiles.json"
        path.write_text("not json at all")
        storage = JsonFileStorage(path)

        assert storage.get_item("k") is None
        storage.set_item("k", "v")
        assert json.loads(path.read_text()) == {"k": "v"}

    def test_non_string_values_dropped(self, tmp_path: Path) -> None:
        """Test only string values are loaded."""
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"a": "ok", "b": 3, "c": None}))

        storage = JsonFileStorage(path)

        assert storage.get_item("a") == "ok"
        assert storage.get_item("b") is None


class TestHttpxFetcher:
    """Tests for the httpx adapter."""

    def test_wraps_response(self) -> None:
        """Test the adapter maps an httpx response to a FetchResponse."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={"data": {"comment_karma": 1}})

        async def scenario() -> FetchResponse:
            client = httpx.AsyncClient(
                base_url="https://example.test",
                transport=httpx.MockTransport(handler),
            )
            async with HttpxFetcher(client=client) as fetcher:
                return await fetcher(profile_url("alice"))

        response = asyncio.run(scenario())

        assert response.ok
        assert response.status == 200
        assert response.json() == {"data": {"comment_karma": 1}}
        assert seen == ["/user/alice/about.json"]

    def test_rate_limit_through_cache(self, clock: FakeClock, fake_sleep: FakeSleep) -> None:
        """Test a real 429 response with a reset header drives the backoff."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, headers={"X-Ratelimit-Reset": "12"}, text="slow down")

        async def scenario() -> ProfileCache:
            client = httpx.AsyncClient(
                base_url="https://example.test",
                transport=httpx.MockTransport(handler),
            )
            async with HttpxFetcher(client=client) as fetcher:
                cache = ProfileCache(fetcher, clock=clock, sleep=fake_sleep)
                assert await cache.get_profile("alice") is None
                return cache

        cache = asyncio.run(scenario())

        assert cache.backoff_until == pytest.approx(NOW + 12)

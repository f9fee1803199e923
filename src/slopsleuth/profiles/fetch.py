"""httpx adapter for the injected profile fetch function."""

from __future__ import annotations

from typing import Any

import httpx

from sleuth_utils.settings import get_settings
from slopsleuth.profiles.types import FetchResponse


class HttpxFetcher:
    """Async fetch function backed by ``httpx.AsyncClient``.

    Transport errors propagate; the profile cache turns them into cached
    misses.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        user_agent: str | None = None,
        timeout: float = 15.0,
    ) -> None:
        """Initialize fetcher.

        Args:
            base_url: Site root. If not provided, reads from settings.
            client: Preconfigured client (e.g. with a mock transport).
            user_agent: User-Agent header. If not provided, reads from settings.
            timeout: Transport timeout in seconds.
        """
        if client is None:
            settings = get_settings()
            client = httpx.AsyncClient(
                base_url=base_url or settings.profile_base_url,
                headers={"User-Agent": user_agent or settings.user_agent},
                timeout=timeout,
                follow_redirects=True,
            )
        self._client = client

    async def __call__(self, url: str, **options: Any) -> FetchResponse:
        response = await self._client.get(url, **options)
        try:
            body = response.json()
        except ValueError:
            body = None
        return FetchResponse(
            ok=response.is_success,
            status=response.status_code,
            headers=dict(response.headers),
            body=body,
        )

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> HttpxFetcher:
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Exit async context manager."""
        await self.aclose()

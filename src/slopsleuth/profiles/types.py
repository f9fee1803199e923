"""Profile lookup types: account data, cache entries and the fetch boundary."""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from pydantic import ConfigDict, Field

from sleuth_utils import StrictModel


class Profile(StrictModel):
    """Account reputation data from an ``about.json`` payload.

    Only the fields the scorer uses are kept; the rest of the payload is
    ignored rather than rejected.
    """

    model_config = ConfigDict(
        strict=True,
        frozen=True,
        extra="ignore",
        validate_assignment=True,
        populate_by_name=True,
    )

    created_at_seconds: float | None = Field(default=None, alias="created_utc")
    comment_karma: int = 0
    link_karma: int = 0
    is_employee: bool = False

    @property
    def total_karma(self) -> int:
        return self.comment_karma + self.link_karma


class CacheEntry(StrictModel):
    """Outcome of one profile fetch, as persisted to durable storage."""

    model_config = ConfigDict(
        strict=True,
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        populate_by_name=True,
    )

    status: Literal["ok", "fail"]
    fetched_at: float = Field(alias="fetchedAt")
    data: Profile | None = None


@dataclass(frozen=True)
class FetchResponse:
    """Minimal response shape the profile cache depends on."""

    ok: bool
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None

    def json(self) -> Any:
        return self.body


class FetchFn(Protocol):
    """Injected network function: ``await fetch(url, **options)``."""

    def __call__(self, url: str, **options: Any) -> Awaitable[FetchResponse]: ...


class KeyValueStorage(Protocol):
    """Durable string storage scoped to one origin."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

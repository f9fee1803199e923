"""Account profile lookups.

This package fetches ``about.json`` style profiles through an injected
network function, with durable caching, request pacing and rate-limit
backoff.
"""

from slopsleuth.profiles.cache import CachePolicy, ProfileCache, profile_url
from slopsleuth.profiles.fetch import HttpxFetcher
from slopsleuth.profiles.storage import JsonFileStorage, MemoryStorage
from slopsleuth.profiles.types import (
    CacheEntry,
    FetchFn,
    FetchResponse,
    KeyValueStorage,
    Profile,
)

__all__ = [
    "CacheEntry",
    "CachePolicy",
    "FetchFn",
    "FetchResponse",
    "HttpxFetcher",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "Profile",
    "ProfileCache",
    "profile_url",
]

"""Adapter layer package for cache snapshot ingestion and lookups."""

from .cache_loader import CacheLoader, CacheLoaderError
from .result_cache import (
    CacheFormatError,
    CacheView,
    Fetched,
    FetchFailed,
    FetchOutcome,
    NotFetched,
    ResultCache,
    describe_error,
)

__all__ = [
    "CacheFormatError",
    "CacheLoader",
    "CacheLoaderError",
    "CacheView",
    "FetchFailed",
    "FetchOutcome",
    "Fetched",
    "NotFetched",
    "ResultCache",
    "describe_error",
]

"""Read access to the pre-populated, region-keyed API response cache."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from ..models import AlertPolicy, MetricRecord
from ..normalization import ResourceNormalizer

T = TypeVar("T")

UNKNOWN_ERROR = "Unknown error occurred while querying data"


class CacheFormatError(RuntimeError):
    """Raised when a cache entry does not follow the ``{err, data}`` contract."""


@dataclass(frozen=True, slots=True)
class Fetched(Generic[T]):
    """A collection that was queried successfully."""

    items: Tuple[T, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class NotFetched:
    """The collection was never queried for this region."""


@dataclass(frozen=True, slots=True)
class FetchFailed:
    """The collection query returned an error or no data."""

    message: str
    errors: Any = None


FetchOutcome = Union[Fetched[T], NotFetched, FetchFailed]


def describe_error(errors: Any) -> str:
    """Render the error payload of a cache entry as a single line of text."""

    if not errors:
        return UNKNOWN_ERROR

    if isinstance(errors, str):
        return errors

    if isinstance(errors, Mapping):
        for key in ("message", "code"):
            value = errors.get(key)
            if value:
                return str(value)
        return str(dict(errors))

    if isinstance(errors, (list, tuple)):
        parts = [describe_error(item) for item in errors if item]
        return ", ".join(parts) if parts else UNKNOWN_ERROR

    return str(errors)


class ResultCache:
    """Nested ``collection -> operation -> region`` mapping of API responses."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: Mapping[str, Any] = data or {}

    @property
    def data(self) -> Mapping[str, Any]:
        return self._data

    # ------------------------------------------------------------------
    def lookup(self, path: Sequence[str]) -> Optional[Mapping[str, Any]]:
        """Return the entry stored at ``path`` or ``None`` when it was never populated."""

        node: Any = self._data
        for depth, key in enumerate(path):
            if node is None:
                return None
            if not isinstance(node, Mapping):
                prefix = "/".join(path[:depth])
                raise CacheFormatError(f"Cache node at {prefix} must be a mapping")
            if key not in node:
                return None
            node = node[key]

        if node is None:
            return None
        if not isinstance(node, Mapping):
            raise CacheFormatError(f"Cache entry at {'/'.join(path)} must be a mapping")
        return node


class CacheView:
    """Cache reader that mirrors every consulted entry into a ``source`` map.

    The ``source`` map has the same ``collection -> operation -> region``
    shape as the cache and is handed back to callers alongside findings so a
    run can be traced to the exact responses it evaluated. Lookups may be
    issued from several region workers at once.
    """

    def __init__(
        self,
        cache: ResultCache,
        *,
        normalizer: ResourceNormalizer | None = None,
        source: MutableMapping[str, Any] | None = None,
    ) -> None:
        self.cache = cache
        self.normalizer = normalizer or ResourceNormalizer()
        self.source: MutableMapping[str, Any] = source if source is not None else {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    def add_source(self, path: Sequence[str]) -> Optional[Mapping[str, Any]]:
        """Look up ``path`` and record the entry in the source map."""

        entry = self.cache.lookup(path)
        with self._lock:
            node = self.source
            for key in path[:-1]:
                node = node.setdefault(key, {})
            node[path[-1]] = entry
        return entry

    # ------------------------------------------------------------------
    def fetch(self, path: Sequence[str], parse: Callable[[Mapping[str, Any]], T]) -> FetchOutcome[T]:
        """Resolve ``path`` into a :class:`Fetched`, :class:`NotFetched` or :class:`FetchFailed`."""

        entry = self.add_source(path)
        if entry is None:
            return NotFetched()

        errors = entry.get("err") or entry.get("error")
        data = entry.get("data")
        if errors or data is None:
            return FetchFailed(message=describe_error(errors), errors=errors)

        if not isinstance(data, list):
            raise CacheFormatError(f"Cache data at {'/'.join(path)} must be a list")

        items: List[T] = []
        for item in data:
            if not isinstance(item, Mapping):
                raise CacheFormatError(f"Cache data at {'/'.join(path)} must contain objects")
            items.append(parse(item))
        return Fetched(items=tuple(items))

    def fetch_metrics(self, region: str) -> FetchOutcome[MetricRecord]:
        return self.fetch(("metrics", "list", region), self.normalizer.metric)

    def fetch_alert_policies(self, region: str) -> FetchOutcome[AlertPolicy]:
        return self.fetch(("alertPolicies", "list", region), self.normalizer.alert_policy)

    # ------------------------------------------------------------------
    def snapshot(self) -> Dict[str, Any]:
        """Return a copy of the source map taken under the lock."""

        with self._lock:
            return _deep_copy(self.source)


def _deep_copy(node: Any) -> Any:
    if isinstance(node, Mapping):
        return {key: _deep_copy(value) for key, value in node.items()}
    return node


__all__ = [
    "CacheFormatError",
    "CacheView",
    "FetchFailed",
    "FetchOutcome",
    "Fetched",
    "NotFetched",
    "ResultCache",
    "describe_error",
]

"""Load cache snapshots captured by the collection step from disk."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .result_cache import ResultCache

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


class CacheLoaderError(RuntimeError):
    """Exception raised when a cache snapshot cannot be loaded."""


class CacheLoader:
    """Read a JSON or YAML cache snapshot into a :class:`ResultCache`."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path).resolve()

    def load(self) -> ResultCache:
        """Load the snapshot and wrap it in a :class:`ResultCache`."""

        data = self._read()
        logger.info("Loaded cache snapshot %s with %d collections", self.path, len(data))
        return ResultCache(data)

    # Artifact ingestion helpers -------------------------------------------------
    def _read(self) -> Mapping[str, Any]:
        if not self.path.exists():
            raise CacheLoaderError(f"Cache snapshot not found: {self.path}")

        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as exc:  # pragma: no cover - filesystem errors surfaced to caller
            raise CacheLoaderError(f"Failed to read cache snapshot {self.path}") from exc

        if self.path.suffix.lower() in _YAML_SUFFIXES:
            data = self._parse_yaml(content)
        else:
            data = self._parse_json(content)

        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise CacheLoaderError(f"Cache snapshot must be a mapping: {self.path}")
        return dict(data)

    def _parse_yaml(self, content: str) -> Any:
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise CacheLoaderError(f"Invalid YAML in cache snapshot: {self.path}") from exc

    def _parse_json(self, content: str) -> Any:
        if not content.strip():
            return None
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            raise CacheLoaderError(f"Invalid JSON in cache snapshot: {self.path}") from exc


__all__ = ["CacheLoader", "CacheLoaderError"]

"""Utilities for loading and merging rule manifest files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, MutableMapping, Sequence

import yaml

logger = logging.getLogger(__name__)


class RuleManifestError(RuntimeError):
    """Raised when rule manifests cannot be loaded or parsed."""


@dataclass(slots=True)
class RuleConfig:
    """Configuration for a single rule after all manifests are merged."""

    rule_id: str
    enabled: bool = True
    regions: List[str] = field(default_factory=list)
    settings: Dict[str, Any] = field(default_factory=dict)


class RuleManifestManager:
    """Load rule manifests and expose per-rule configuration to the scan service."""

    def __init__(self, default_manifests: Sequence[Path | str] | None = None) -> None:
        self._default_manifests = [Path(path) for path in default_manifests or []]

    # ------------------------------------------------------------------
    def load(self, manifests: Sequence[Path | str] | None = None) -> Dict[str, RuleConfig]:
        """Return rule configuration keyed by rule id, later manifests winning."""

        manifest_paths = list(self._default_manifests)
        if manifests:
            manifest_paths.extend(Path(path) for path in manifests)

        configs: MutableMapping[str, RuleConfig] = {}
        for manifest_path in manifest_paths:
            data = self._load_manifest(manifest_path)
            for rule_config in data.get("rules", []) or []:
                if not isinstance(rule_config, Mapping):
                    logger.warning("Ignoring non-mapping rule entry in %s", manifest_path)
                    continue

                rule_id = str(rule_config.get("id") or "").strip()
                if not rule_id:
                    logger.warning("Ignoring rule entry without id in %s", manifest_path)
                    continue

                config = configs.get(rule_id, RuleConfig(rule_id=rule_id))
                if "enabled" in rule_config:
                    config.enabled = bool(rule_config["enabled"])

                regions = rule_config.get("regions")
                if isinstance(regions, str):
                    config.regions = [regions]
                elif isinstance(regions, Sequence):
                    config.regions = [str(region) for region in regions]

                settings = rule_config.get("settings")
                if isinstance(settings, Mapping):
                    config.settings.update(settings)

                configs[rule_id] = config

        return dict(configs)

    # ------------------------------------------------------------------
    def _load_manifest(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise RuleManifestError(f"Rule manifest not found: {path}")

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:  # pragma: no cover - filesystem errors surfaced to caller
            raise RuleManifestError(f"Failed to read rule manifest {path}") from exc

        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as exc:
            raise RuleManifestError(f"Invalid YAML in rule manifest {path}") from exc

        if not isinstance(data, Mapping):
            raise RuleManifestError(f"Rule manifest must be a mapping: {path}")

        return dict(data)


__all__ = ["RuleConfig", "RuleManifestError", "RuleManifestManager"]

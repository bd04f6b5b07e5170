"""Orchestration layer used by the CLI to execute compliance rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

from .adapters import CacheFormatError, ResultCache
from .models import Finding, FindingSeverity
from .rules import (
    Rule,
    RuleConfig,
    RuleManifestError,
    RuleManifestManager,
    RuleRegistry,
    UnknownRuleError,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanResult:
    """Result returned by :class:`ScanService` runs."""

    findings: list[Finding]
    sources: Mapping[str, Any]
    metadata: Mapping[str, Any]


class ScanService:
    """High level service responsible for selecting and running rules against a cache."""

    def __init__(
        self,
        *,
        registry: RuleRegistry | None = None,
        manifest_manager: RuleManifestManager | None = None,
    ) -> None:
        self._registry = registry or RuleRegistry()
        self._manifest_manager = manifest_manager or RuleManifestManager()

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    # ------------------------------------------------------------------
    def scan(
        self,
        cache: ResultCache,
        *,
        rule_ids: Sequence[str] | None = None,
        manifests: Sequence[str] | None = None,
        regions: Sequence[str] | None = None,
        settings: Mapping[str, Any] | None = None,
        severity_threshold: FindingSeverity | None = None,
    ) -> ScanResult:
        """Run the selected rules and return their combined findings.

        ``regions`` overrides any regions configured in the manifests.
        ``settings`` are applied on top of each rule's manifest settings.
        """

        configs = self._manifest_manager.load(manifests)
        rules = self._select_rules(rule_ids, configs)

        findings: List[Finding] = []
        sources: Dict[str, Any] = {}
        for rule in rules:
            config = configs.get(rule.rule_id, RuleConfig(rule_id=rule.rule_id))
            rule_settings: Dict[str, Any] = dict(config.settings)
            rule_settings.update(settings or {})
            rule_regions = list(regions or config.regions) or None

            logger.info("Running rule %s", rule.rule_id)
            result = rule.run(cache, rule_settings, regions=rule_regions)
            findings.extend(result.findings)
            sources[rule.rule_id] = result.source

        if severity_threshold is not None:
            findings = [finding for finding in findings if finding.severity >= severity_threshold]

        metadata: dict[str, Any] = {
            "rules": [rule.rule_id for rule in rules],
            "rule_count": len(rules),
            "finding_count": len(findings),
        }

        return ScanResult(findings=findings, sources=sources, metadata=metadata)

    # ------------------------------------------------------------------
    def _select_rules(
        self,
        rule_ids: Sequence[str] | None,
        configs: Mapping[str, RuleConfig],
    ) -> List[Rule]:
        if rule_ids:
            return [self._registry.get(rule_id) for rule_id in rule_ids]

        for rule_id in configs:
            if rule_id not in self._registry:
                logger.warning("Manifest references unknown rule %s", rule_id)

        return [
            rule
            for rule in self._registry
            if configs.get(rule.rule_id, RuleConfig(rule_id=rule.rule_id)).enabled
        ]


__all__ = [
    "CacheFormatError",
    "RuleManifestError",
    "ScanResult",
    "ScanService",
    "UnknownRuleError",
]

"""Rule contract and the per-region fan-out shared by every rule."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..adapters import CacheView, ResultCache
from ..models import Finding, FindingSeverity
from ..normalization import ResourceNormalizer
from ..regions import regions_for

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8

RuleCallback = Callable[[Optional[Exception], List[Finding], Dict[str, Any]], None]


@dataclass(frozen=True, slots=True)
class RuleMetadata:
    """Static descriptive data every rule exposes to the orchestrator."""

    title: str
    category: str
    domain: str
    description: str
    more_info: str = ""
    link: str = ""
    recommended_action: str = ""
    apis: Tuple[str, ...] = ()
    compliance: Mapping[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class RuleResult:
    """Findings of one rule run plus the cache entries that were consulted."""

    findings: List[Finding]
    source: Dict[str, Any]


class Rule(ABC):
    """Base class for region-scoped compliance rules.

    Subclasses implement :meth:`evaluate_region`, which must return exactly one
    finding for the region, or ``None`` when the collections it needs were never
    fetched for that region.
    """

    rule_id: str = ""
    metadata: RuleMetadata
    region_collection: str = ""

    def __init__(
        self,
        *,
        normalizer: ResourceNormalizer | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.normalizer = normalizer or ResourceNormalizer()
        self.max_workers = max_workers

    # ------------------------------------------------------------------
    def run(
        self,
        cache: ResultCache,
        settings: Mapping[str, Any] | None = None,
        *,
        regions: Sequence[str] | None = None,
        callback: RuleCallback | None = None,
    ) -> RuleResult:
        """Evaluate every region and return the collected findings.

        Regions are evaluated concurrently; each region's finding is appended
        once all workers have finished, in region order. When ``callback`` is
        supplied it is invoked with ``(None, findings, source)`` after the join.
        """

        settings = dict(settings or {})
        region_list = regions_for(self.region_collection, regions)
        view = CacheView(cache, normalizer=self.normalizer)

        findings: List[Finding] = []
        if region_list:
            workers = max(1, min(self.max_workers, len(region_list)))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures: List[Tuple[str, Future[Optional[Finding]]]] = [
                    (region, executor.submit(self.evaluate_region, view, region, settings))
                    for region in region_list
                ]

            for region, future in futures:
                finding = future.result()
                if finding is None:
                    logger.warning(
                        "Rule %s skipped region %s: required collections were not fetched",
                        self.rule_id,
                        region,
                    )
                    continue
                findings.append(finding)

        logger.info(
            "Rule %s evaluated %d region(s) and produced %d finding(s)",
            self.rule_id,
            len(region_list),
            len(findings),
        )

        result = RuleResult(findings=findings, source=view.snapshot())
        if callback is not None:
            callback(None, list(result.findings), result.source)
        return result

    # ------------------------------------------------------------------
    @abstractmethod
    def evaluate_region(
        self,
        view: CacheView,
        region: str,
        settings: Mapping[str, Any],
    ) -> Optional[Finding]:
        """Return the single finding for ``region``."""

    # ------------------------------------------------------------------
    def finding(
        self,
        severity: FindingSeverity,
        message: str,
        region: str,
        *,
        resource: str | None = None,
        error: Any = None,
    ) -> Finding:
        return Finding(
            rule_id=self.rule_id,
            severity=severity,
            message=message,
            region=region,
            resource=resource,
            error=error,
        )


__all__ = ["Rule", "RuleCallback", "RuleMetadata", "RuleResult"]

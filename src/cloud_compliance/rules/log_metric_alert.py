"""Correlation of log-based metrics with the alert policies that watch them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from ..adapters import CacheView, NotFetched
from ..models import AlertCondition, AlertPolicy, Finding, FindingSeverity, MetricRecord
from .base import Rule
from .triage import build_triage_chain, run_triage

logger = logging.getLogger(__name__)


class MetricStatus(str, Enum):
    """Result of scanning metrics for the target filter."""

    ENABLED = "enabled"
    DISABLED = "disabled"
    MISSING = "missing"


@dataclass(frozen=True, slots=True)
class MetricMatch:
    status: MetricStatus
    metric_type: str = ""


def find_metric(metrics: Iterable[MetricRecord], target_filter: str) -> MetricMatch:
    """Scan ``metrics`` in order for one whose trimmed filter equals ``target_filter``.

    The first enabled match ends the scan and wins over any disabled match
    seen before it. Disabled matches alone report :attr:`MetricStatus.DISABLED`.
    """

    disabled = False
    for metric in metrics:
        if not metric.filter or metric.filter.strip() != target_filter:
            continue

        if metric.disabled:
            disabled = True
            continue

        if metric.metric_descriptor_type:
            return MetricMatch(MetricStatus.ENABLED, metric.metric_descriptor_type)
        return MetricMatch(MetricStatus.MISSING)

    if disabled:
        return MetricMatch(MetricStatus.DISABLED)
    return MetricMatch(MetricStatus.MISSING)


def iter_policy_conditions(
    policies: Iterable[AlertPolicy],
) -> Iterator[Tuple[AlertPolicy, AlertCondition]]:
    """Yield ``(policy, condition)`` pairs in policy order, then condition order."""

    for policy in policies:
        for condition in policy.conditions:
            yield policy, condition


def find_alerting_policy(policies: Iterable[AlertPolicy], metric_type: str) -> Optional[AlertPolicy]:
    """Return the first policy with a threshold condition watching ``metric_type``."""

    for policy, condition in iter_policy_conditions(policies):
        if condition.referenced_metric == metric_type:
            return policy
    return None


class LogMetricAlertRule(Rule):
    """Check that a log-based metric and an alert on it exist for an activity.

    Subclasses set :attr:`target_filter` to the exact metric filter expected
    and :attr:`subject` to the wording used in findings, e.g.
    ``"storage permission changes"``.
    """

    target_filter: str = ""
    subject: str = ""
    region_collection = "alertPolicies"

    _TRIAGE_CHAIN = build_triage_chain(
        [
            ("metrics", "log metrics"),
            ("alertPolicies", "log alert policies"),
        ]
    )

    # ------------------------------------------------------------------
    def evaluate_region(
        self,
        view: CacheView,
        region: str,
        settings: Mapping[str, Any],
    ) -> Optional[Finding]:
        metrics = view.fetch_metrics(region)
        policies = view.fetch_alert_policies(region)
        if isinstance(metrics, NotFetched) or isinstance(policies, NotFetched):
            return None

        verdict = run_triage(self._TRIAGE_CHAIN, {"metrics": metrics, "alertPolicies": policies})
        if verdict is not None:
            logger.debug("Region %s failed triage check %s", region, verdict.check)
            return self.finding(verdict.severity, verdict.message, region, error=verdict.error)

        return self.correlate(metrics.items, policies.items, region)  # type: ignore[union-attr]

    # ------------------------------------------------------------------
    def correlate(
        self,
        metrics: Sequence[MetricRecord],
        policies: Sequence[AlertPolicy],
        region: str,
    ) -> Finding:
        """Reduce fetched metrics and alert policies to the region's finding."""

        match = find_metric(metrics, self.target_filter)
        logger.debug("Region %s metric scan: %s", region, match.status.value)

        if match.status is MetricStatus.DISABLED:
            return self.finding(
                FindingSeverity.FAIL, f"Log metric for {self.subject} is disabled", region
            )

        if match.status is MetricStatus.MISSING:
            return self.finding(
                FindingSeverity.FAIL, f"Log metric for {self.subject} not found", region
            )

        policy = find_alerting_policy(policies, match.metric_type)
        if policy is None:
            return self.finding(
                FindingSeverity.FAIL, f"Log alert for {self.subject} not found", region
            )

        return self.finding(
            FindingSeverity.OK,
            f"Log alert for {self.subject} is enabled",
            region,
            resource=policy.name,
        )


__all__ = [
    "LogMetricAlertRule",
    "MetricMatch",
    "MetricStatus",
    "find_alerting_policy",
    "find_metric",
    "iter_policy_conditions",
]

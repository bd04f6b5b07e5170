"""Models for the Cloud Logging and Cloud Monitoring resources read by rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class MetricRecord:
    """A log-based metric definition."""

    filter: str = ""
    disabled: bool = False
    metric_descriptor_type: str = ""
    name: str = ""


@dataclass(frozen=True, slots=True)
class AlertCondition:
    """A single alert policy condition."""

    threshold_filter: Optional[str] = None
    display_name: str = ""

    @property
    def referenced_metric(self) -> Optional[str]:
        """Return the first double-quoted segment of the threshold filter.

        Threshold filters embed the watched metric type in quotes, e.g.
        ``metric.type="logging.googleapis.com/user/storage-iam"``.
        """

        if not self.threshold_filter:
            return None

        parts = self.threshold_filter.split('"')
        if len(parts) < 2:
            return None
        return parts[1]


@dataclass(frozen=True, slots=True)
class AlertPolicy:
    """An alert policy and its ordered conditions."""

    name: str = ""
    conditions: Tuple[AlertCondition, ...] = field(default_factory=tuple)
    display_name: str = ""
    enabled: bool = True

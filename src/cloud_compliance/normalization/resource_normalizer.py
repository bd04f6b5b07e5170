"""Conversion helpers that turn raw Google Cloud API payloads into service models."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..models import AlertCondition, AlertPolicy, MetricRecord


class ResourceNormalizer:
    """Normalize ``logging.metrics`` and ``monitoring.alertPolicies`` payloads."""

    def metric(self, raw: Mapping[str, Any]) -> MetricRecord:
        """Return a :class:`MetricRecord` for a raw log-based metric."""

        return MetricRecord(
            filter=self._string(raw.get("filter")),
            disabled=bool(raw.get("disabled", False)),
            metric_descriptor_type=self._descriptor_type(raw),
            name=self._string(raw.get("name")),
        )

    def alert_policy(self, raw: Mapping[str, Any]) -> AlertPolicy:
        """Return an :class:`AlertPolicy` for a raw alert policy."""

        conditions: Iterable[Any] = raw.get("conditions") or []
        enabled = raw.get("enabled")

        return AlertPolicy(
            name=self._string(raw.get("name")),
            conditions=tuple(
                self._condition(condition)
                for condition in conditions
                if isinstance(condition, Mapping)
            ),
            display_name=self._string(raw.get("displayName")),
            enabled=True if enabled is None else bool(enabled),
        )

    # ------------------------------------------------------------------
    def _condition(self, raw: Mapping[str, Any]) -> AlertCondition:
        threshold = raw.get("conditionThreshold")
        threshold_filter = None
        if isinstance(threshold, Mapping):
            value = threshold.get("filter")
            if isinstance(value, str) and value:
                threshold_filter = value

        return AlertCondition(
            threshold_filter=threshold_filter,
            display_name=self._string(raw.get("displayName")),
        )

    def _descriptor_type(self, raw: Mapping[str, Any]) -> str:
        descriptor = raw.get("metricDescriptor")
        if isinstance(descriptor, Mapping) and descriptor.get("type"):
            return self._string(descriptor.get("type"))
        return self._string(raw.get("metricDescriptorType"))

    def _string(self, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


__all__ = ["ResourceNormalizer"]

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

from cloud_compliance.adapters import ResultCache

STORAGE_FILTER = 'resource.type=gcs_bucket AND protoPayload.methodName="storage.setIamPermissions"'
METRIC_TYPE = "logging.googleapis.com/user/storage-permission-changes"


def _make_metric(
    *,
    filter: str = STORAGE_FILTER,
    disabled: bool = False,
    metric_type: str = METRIC_TYPE,
) -> dict[str, Any]:
    return {
        "name": "storage-permission-changes",
        "filter": filter,
        "disabled": disabled,
        "metricDescriptor": {"type": metric_type},
    }


def _make_policy(name: str, *filters: str) -> dict[str, Any]:
    return {
        "name": name,
        "displayName": name.rsplit("/", 1)[-1],
        "conditions": [{"conditionThreshold": {"filter": value}} for value in filters],
    }


def _build_cache(metrics: Any, policies: Any, region: str = "global") -> ResultCache:
    data: dict[str, Any] = {}
    if metrics is not None:
        data["metrics"] = {"list": {region: metrics}}
    if policies is not None:
        data["alertPolicies"] = {"list": {region: policies}}
    return ResultCache(data)


@pytest.fixture
def gcp() -> SimpleNamespace:
    """Builders for raw Cloud Logging / Cloud Monitoring cache payloads."""

    return SimpleNamespace(
        STORAGE_FILTER=STORAGE_FILTER,
        METRIC_TYPE=METRIC_TYPE,
        metric=_make_metric,
        policy=_make_policy,
        cache=_build_cache,
        watching=f'metric.type="{METRIC_TYPE}" AND resource.type="global"',
    )

from __future__ import annotations

from typing import Any

import pytest

from cloud_compliance.adapters import CacheFormatError, ResultCache
from cloud_compliance.models import FindingSeverity
from cloud_compliance.rules import StoragePermissionsLogging


@pytest.fixture
def rule() -> StoragePermissionsLogging:
    return StoragePermissionsLogging()


def test_enabled_metric_with_alert_is_ok(rule, gcp) -> None:
    cache = gcp.cache(
        {"data": [gcp.metric(metric_type="custom.googleapis.com/m1")]},
        {"data": [gcp.policy("policy1", 'metric.type="custom.googleapis.com/m1" AND x')]},
    )

    result = rule.run(cache)

    assert len(result.findings) == 1
    finding = result.findings[0]
    assert finding.severity is FindingSeverity.OK
    assert finding.message == "Log alert for storage permission changes is enabled"
    assert finding.region == "global"
    assert finding.resource == "policy1"
    assert finding.rule_id == "storagePermissionsLogging"


def test_policy_without_conditions_reports_missing_alert(rule, gcp) -> None:
    cache = gcp.cache({"data": [gcp.metric()]}, {"data": [gcp.policy("policy1")]})

    (finding,) = rule.run(cache).findings

    assert finding.severity is FindingSeverity.FAIL
    assert finding.message == "Log alert for storage permission changes not found"
    assert finding.resource is None


def test_no_metrics(rule, gcp) -> None:
    cache = gcp.cache({"data": []}, {"data": [gcp.policy("policy1", gcp.watching)]})

    (finding,) = rule.run(cache).findings

    assert finding.severity is FindingSeverity.FAIL
    assert finding.message == "No log metrics found"


def test_no_alert_policies(rule, gcp) -> None:
    cache = gcp.cache({"data": [gcp.metric()]}, {"data": []})

    (finding,) = rule.run(cache).findings

    assert finding.severity is FindingSeverity.FAIL
    assert finding.message == "No log alert policies found"


def test_metric_query_error_is_unknown(rule, gcp) -> None:
    cache = gcp.cache(
        {"err": ["permission denied"], "data": None},
        {"data": [gcp.policy("policy1", gcp.watching)]},
    )

    (finding,) = rule.run(cache).findings

    assert finding.severity is FindingSeverity.UNKNOWN
    assert finding.message == "Unable to query for log metrics: permission denied"
    assert finding.error == ["permission denied"]


def test_metric_error_wins_over_alert_policy_error(rule, gcp) -> None:
    cache = gcp.cache({"error": ["quota exceeded"]}, {"err": ["forbidden"]})

    (finding,) = rule.run(cache).findings

    assert finding.severity is FindingSeverity.UNKNOWN
    assert finding.message.startswith("Unable to query for log metrics:")


def test_alert_policy_error_wins_over_empty_metrics(rule, gcp) -> None:
    cache = gcp.cache({"data": []}, {"err": [{"message": "API not enabled"}], "data": None})

    (finding,) = rule.run(cache).findings

    assert finding.severity is FindingSeverity.UNKNOWN
    assert finding.message == "Unable to query for log alert policies: API not enabled"


def test_missing_data_without_error_is_unknown(rule, gcp) -> None:
    cache = gcp.cache({"data": [gcp.metric()]}, {})

    (finding,) = rule.run(cache).findings

    assert finding.severity is FindingSeverity.UNKNOWN
    assert finding.message.startswith("Unable to query for log alert policies: ")


def test_disabled_metric_takes_precedence_over_alerts(rule, gcp) -> None:
    cache = gcp.cache(
        {"data": [gcp.metric(disabled=True)]},
        {"data": [gcp.policy("policy1", gcp.watching)]},
    )

    (finding,) = rule.run(cache).findings

    assert finding.severity is FindingSeverity.FAIL
    assert finding.message == "Log metric for storage permission changes is disabled"


def test_unrelated_metrics_report_missing_metric(rule, gcp) -> None:
    cache = gcp.cache(
        {"data": [gcp.metric(filter="resource.type=gce_instance"), {"name": "no-filter"}]},
        {"data": [gcp.policy("policy1", gcp.watching)]},
    )

    (finding,) = rule.run(cache).findings

    assert finding.message == "Log metric for storage permission changes not found"


def test_filter_is_trimmed_before_matching(rule, gcp) -> None:
    cache = gcp.cache(
        {"data": [gcp.metric(filter=f"  {gcp.STORAGE_FILTER}\n")]},
        {"data": [gcp.policy("policy1", gcp.watching)]},
    )

    (finding,) = rule.run(cache).findings

    assert finding.severity is FindingSeverity.OK


def test_first_matching_condition_across_policies_wins(rule, gcp) -> None:
    cache = gcp.cache(
        {"data": [gcp.metric()]},
        {
            "data": [
                gcp.policy("unrelated", 'metric.type="logging.googleapis.com/user/other"'),
                {"name": "no-threshold", "conditions": [{"conditionAbsent": {}}]},
                gcp.policy("first", 'resource.type="gcs_bucket"', gcp.watching),
                gcp.policy("second", gcp.watching),
            ]
        },
    )

    (finding,) = rule.run(cache).findings

    assert finding.resource == "first"


def test_region_skipped_when_collection_not_fetched(rule, gcp) -> None:
    cache = gcp.cache({"data": [gcp.metric()]}, None)

    result = rule.run(cache)

    assert result.findings == []
    assert result.source == {
        "metrics": {"list": {"global": {"data": [gcp.metric()]}}},
        "alertPolicies": {"list": {"global": None}},
    }


def test_one_finding_per_region(rule, gcp) -> None:
    regions = ["us-central1", "europe-west1", "asia-east1"]
    data: dict[str, Any] = {
        "metrics": {
            "list": {
                "us-central1": {"data": [gcp.metric()]},
                "europe-west1": {"data": []},
                "asia-east1": {"err": ["denied"]},
            }
        },
        "alertPolicies": {
            "list": {region: {"data": [gcp.policy("p", gcp.watching)]} for region in regions}
        },
    }

    result = rule.run(ResultCache(data), regions=regions)

    assert [finding.region for finding in result.findings] == regions
    assert [finding.severity for finding in result.findings] == [
        FindingSeverity.OK,
        FindingSeverity.FAIL,
        FindingSeverity.UNKNOWN,
    ]
    assert set(result.source["metrics"]["list"]) == set(regions)


def test_repeated_runs_are_identical(rule, gcp) -> None:
    cache = gcp.cache({"data": [gcp.metric()]}, {"data": [gcp.policy("p", gcp.watching)]})

    assert rule.run(cache).findings == rule.run(cache).findings


def test_callback_receives_results_once(rule, gcp) -> None:
    cache = gcp.cache({"data": [gcp.metric()]}, {"data": [gcp.policy("p", gcp.watching)]})
    calls = []

    result = rule.run(cache, callback=lambda error, findings, source: calls.append((error, findings, source)))

    assert len(calls) == 1
    error, findings, source = calls[0]
    assert error is None
    assert findings == result.findings
    assert source == result.source


def test_malformed_cache_data_raises(rule, gcp) -> None:
    cache = gcp.cache({"data": {"not": "a list"}}, {"data": []})

    with pytest.raises(CacheFormatError):
        rule.run(cache)


def test_rule_metadata() -> None:
    metadata = StoragePermissionsLogging.metadata

    assert metadata.title == "Storage Permissions Logging"
    assert metadata.category == "Logging"
    assert metadata.apis == ("metrics:list", "alertPolicies:list")
    assert set(metadata.compliance) == {"pci", "hipaa"}


def test_error_key_counts_when_err_is_empty(rule, gcp) -> None:
    cache = gcp.cache(
        {"err": None, "error": ["permission denied"], "data": [gcp.metric()]},
        {"err": [], "data": [gcp.policy("policy1", gcp.watching)]},
    )

    (finding,) = rule.run(cache).findings

    assert finding.severity is FindingSeverity.UNKNOWN
    assert finding.message == "Unable to query for log metrics: permission denied"
    assert finding.error == ["permission denied"]

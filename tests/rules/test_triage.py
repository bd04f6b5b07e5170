from __future__ import annotations

from cloud_compliance.adapters import Fetched, FetchFailed, NotFetched
from cloud_compliance.models import FindingSeverity
from cloud_compliance.rules import TriageCondition, build_triage_chain, run_triage

CHAIN = build_triage_chain([("metrics", "log metrics"), ("alertPolicies", "log alert policies")])


def test_chain_orders_failures_before_emptiness() -> None:
    assert [(check.source, check.condition) for check in CHAIN] == [
        ("metrics", TriageCondition.QUERY_FAILED),
        ("alertPolicies", TriageCondition.QUERY_FAILED),
        ("metrics", TriageCondition.EMPTY),
        ("alertPolicies", TriageCondition.EMPTY),
    ]
    assert [check.severity for check in CHAIN] == [
        FindingSeverity.UNKNOWN,
        FindingSeverity.UNKNOWN,
        FindingSeverity.FAIL,
        FindingSeverity.FAIL,
    ]


def test_passes_when_both_collections_have_items() -> None:
    outcomes = {"metrics": Fetched(items=("m",)), "alertPolicies": Fetched(items=("p",))}

    assert run_triage(CHAIN, outcomes) is None


def test_query_failure_on_second_source_beats_emptiness_of_first() -> None:
    outcomes = {
        "metrics": Fetched(items=()),
        "alertPolicies": FetchFailed(message="boom", errors=["boom"]),
    }

    verdict = run_triage(CHAIN, outcomes)

    assert verdict is not None
    assert verdict.severity is FindingSeverity.UNKNOWN
    assert verdict.message == "Unable to query for log alert policies: boom"
    assert verdict.error == ["boom"]


def test_empty_sources_checked_in_order() -> None:
    outcomes = {"metrics": Fetched(items=()), "alertPolicies": Fetched(items=())}

    verdict = run_triage(CHAIN, outcomes)

    assert verdict is not None
    assert verdict.message == "No log metrics found"
    assert verdict.error is None


def test_not_fetched_sources_do_not_trigger_checks() -> None:
    outcomes = {"metrics": NotFetched(), "alertPolicies": Fetched(items=("p",))}

    assert run_triage(CHAIN, outcomes) is None

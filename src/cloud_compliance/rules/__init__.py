"""Compliance rules, their shared evaluation pattern and configuration."""

from .base import Rule, RuleCallback, RuleMetadata, RuleResult
from .log_metric_alert import (
    LogMetricAlertRule,
    MetricMatch,
    MetricStatus,
    find_alerting_policy,
    find_metric,
    iter_policy_conditions,
)
from .registry import RuleRegistry, UnknownRuleError, default_rules
from .rule_manifest import RuleConfig, RuleManifestError, RuleManifestManager
from .storage_permissions_logging import TARGET_FILTER, StoragePermissionsLogging
from .triage import TriageCheck, TriageCondition, TriageVerdict, build_triage_chain, run_triage

__all__ = [
    "LogMetricAlertRule",
    "MetricMatch",
    "MetricStatus",
    "Rule",
    "RuleCallback",
    "RuleConfig",
    "RuleManifestError",
    "RuleManifestManager",
    "RuleMetadata",
    "RuleRegistry",
    "RuleResult",
    "StoragePermissionsLogging",
    "TARGET_FILTER",
    "TriageCheck",
    "TriageCondition",
    "TriageVerdict",
    "UnknownRuleError",
    "build_triage_chain",
    "default_rules",
    "find_alerting_policy",
    "find_metric",
    "iter_policy_conditions",
    "run_triage",
]

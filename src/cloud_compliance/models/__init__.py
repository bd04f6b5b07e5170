"""Data models for cached cloud resources and compliance findings."""

from .finding import Finding, FindingSeverity
from .resource import AlertCondition, AlertPolicy, MetricRecord

__all__ = [
    "AlertCondition",
    "AlertPolicy",
    "Finding",
    "FindingSeverity",
    "MetricRecord",
]

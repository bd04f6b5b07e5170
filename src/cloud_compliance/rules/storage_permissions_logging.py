"""Storage Permissions Logging rule for Google Cloud projects."""

from __future__ import annotations

from .base import RuleMetadata
from .log_metric_alert import LogMetricAlertRule

TARGET_FILTER = 'resource.type=gcs_bucket AND protoPayload.methodName="storage.setIamPermissions"'


class StoragePermissionsLogging(LogMetricAlertRule):
    """Ensure a log metric and alert exist for Cloud Storage IAM permission changes."""

    rule_id = "storagePermissionsLogging"
    target_filter = TARGET_FILTER
    subject = "storage permission changes"

    metadata = RuleMetadata(
        title="Storage Permissions Logging",
        category="Logging",
        domain="Management and Governance",
        description="Ensures that logging and log alerts exist for storage permission changes",
        more_info=(
            "Storage permissions include access to the buckets that store the logs, "
            "any changes in storage permissions should be heavily monitored to prevent "
            "unauthorized changes."
        ),
        link="https://cloud.google.com/logging/docs/logs-based-metrics/",
        recommended_action="Ensure that log metric and alert for storage permission changes.",
        apis=("metrics:list", "alertPolicies:list"),
        compliance={
            "pci": (
                "PCI requires tracking and monitoring of all access to environments "
                "in which cardholder data is present. Storage permissions logging "
                "helps ensure that any storage permissions changes, including permissions "
                "in the log storage bucket, are recorded."
            ),
            "hipaa": "HIPAA requires the logging of all activity including access and all actions taken.",
        },
    )


__all__ = ["StoragePermissionsLogging", "TARGET_FILTER"]

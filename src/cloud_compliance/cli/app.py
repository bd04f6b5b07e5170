"""Command-line interface implementation for the compliance tooling."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Sequence

from ..adapters import CacheFormatError, CacheLoader, CacheLoaderError
from ..models import Finding, FindingSeverity
from ..rules import Rule, RuleManifestError, RuleManifestManager, RuleRegistry, UnknownRuleError
from ..service import ScanResult, ScanService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


@dataclass(slots=True)
class ScanReport:
    """Collection of findings plus contextual metadata."""

    findings: Sequence[Finding]
    metadata: Mapping[str, Any]
    sources: Mapping[str, Any]

    @property
    def highest_severity(self) -> FindingSeverity | None:
        if not self.findings:
            return None
        return max(finding.severity for finding in self.findings)

    def counts_by_severity(self) -> dict[str, int]:
        counts: MutableMapping[FindingSeverity, int] = {
            severity: 0 for severity in FindingSeverity
        }
        for finding in self.findings:
            counts[finding.severity] += 1
        return {severity.label: count for severity, count in counts.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": dict(self.metadata),
            "summary": {
                "total_findings": len(self.findings),
                "highest_severity": self.highest_severity.label if self.highest_severity is not None else None,
                "counts": self.counts_by_severity(),
            },
            "findings": [_serialize_finding(finding) for finding in self.findings],
            "sources": dict(self.sources),
        }


def _serialize_finding(finding: Finding) -> dict[str, Any]:
    return {
        "rule_id": finding.rule_id,
        "status": int(finding.severity),
        "severity": finding.severity.label,
        "message": finding.message,
        "region": finding.region,
        "resource": finding.resource,
        "error": finding.error,
    }


def _serialize_rule(rule: Rule) -> dict[str, Any]:
    metadata = rule.metadata
    return {
        "id": rule.rule_id,
        "title": metadata.title,
        "category": metadata.category,
        "domain": metadata.domain,
        "description": metadata.description,
        "more_info": metadata.more_info,
        "link": metadata.link,
        "recommended_action": metadata.recommended_action,
        "apis": list(metadata.apis),
        "compliance": dict(metadata.compliance),
    }


def _render_rows(headers: tuple[str, ...], rows: list[tuple[str, ...]]) -> str:
    table = [headers, *rows]
    widths = [max(len(str(row[idx])) for row in table) for idx in range(len(headers))]

    def format_row(values: tuple[str, ...]) -> str:
        return "  ".join(value.ljust(width) for value, width in zip(values, widths, strict=True)).rstrip()

    lines = [format_row(headers)]
    lines.append("  ".join("=" * width for width in widths))
    for row in rows:
        lines.append(format_row(row))
    return "\n".join(lines)


def render_table(report: ScanReport) -> str:
    """Render findings as a simple text table for terminal output."""

    if not report.findings:
        return "No findings detected."

    headers = ("Status", "Rule ID", "Region", "Resource", "Message")
    rows = [
        (
            finding.severity.name,
            finding.rule_id,
            finding.region,
            finding.resource or "-",
            finding.message,
        )
        for finding in report.findings
    ]
    return _render_rows(headers, rows)


def render_rules_table(rules: Sequence[Rule]) -> str:
    """Render the registered rules as a text table."""

    if not rules:
        return "No rules registered."

    headers = ("Rule ID", "Title", "Category", "APIs")
    rows = [
        (rule.rule_id, rule.metadata.title, rule.metadata.category, ", ".join(rule.metadata.apis))
        for rule in rules
    ]
    return _render_rows(headers, rows)


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""

    parser = argparse.ArgumentParser(prog="cloud-compliance", description="Cloud compliance CLI")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging verbosity written to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")

    scan_parser = subparsers.add_parser(
        "scan", help="Evaluate compliance rules against a cached API snapshot."
    )
    scan_parser.add_argument(
        "cache",
        type=Path,
        help="Path to a JSON or YAML cache snapshot of collected API responses.",
    )
    scan_parser.add_argument(
        "--rule",
        dest="rules",
        action="append",
        default=None,
        help="Rule id to run. May be repeated; defaults to every enabled rule.",
    )
    scan_parser.add_argument(
        "--rule-manifest",
        dest="rule_manifests",
        action="append",
        default=None,
        type=str,
        help="Path to a rule manifest YAML/JSON file configuring rules.",
    )
    scan_parser.add_argument(
        "--region",
        dest="regions",
        action="append",
        default=None,
        help="Region to evaluate. May be repeated; overrides manifest and default regions.",
    )
    scan_parser.add_argument(
        "--fail-on",
        choices=[severity.label for severity in FindingSeverity],
        default=FindingSeverity.FAIL.label,
        help="Fail the run when findings at or above the provided severity are present.",
    )
    scan_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format for scan results.",
    )

    rules_parser = subparsers.add_parser("rules", help="List the registered compliance rules.")
    rules_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format for the rule listing.",
    )

    return parser


def create_service(
    *,
    registry: RuleRegistry | None = None,
    default_rule_manifests: Sequence[str] | None = None,
) -> ScanService:
    """Create a scan service with the built-in rule registry."""

    manager = RuleManifestManager(default_manifests=list(default_rule_manifests or []))
    return ScanService(registry=registry or RuleRegistry(), manifest_manager=manager)


def _build_report(result: ScanResult) -> ScanReport:
    return ScanReport(findings=result.findings, metadata=result.metadata, sources=result.sources)


def _format_report(
    report: ScanReport,
    *,
    fail_on: FindingSeverity,
    output_format: str,
) -> tuple[str, bool]:
    if output_format not in {"table", "json"}:
        raise ValueError("format must be either 'table' or 'json'")

    highest = report.highest_severity
    should_fail = highest is not None and highest >= fail_on

    if output_format == "json":
        output = json.dumps(report.to_dict(), indent=2, default=str)
    else:
        output = render_table(report)

    return output, should_fail


def _handle_scan(args: argparse.Namespace) -> int:
    service = create_service()

    try:
        cache = CacheLoader(args.cache).load()
        result = service.scan(
            cache,
            rule_ids=args.rules,
            manifests=list(args.rule_manifests or []),
            regions=args.regions,
        )
    except (CacheLoaderError, CacheFormatError, RuleManifestError, UnknownRuleError) as exc:
        logger.debug("Scan aborted", exc_info=True)
        print(f"Error: {exc}")
        return 2

    report = _build_report(result)
    output, should_fail = _format_report(
        report,
        fail_on=FindingSeverity.from_label(args.fail_on),
        output_format=args.format,
    )

    print(output)
    return 1 if should_fail else 0


def _handle_rules(args: argparse.Namespace) -> int:
    rules = list(RuleRegistry())
    if args.format == "json":
        print(json.dumps([_serialize_rule(rule) for rule in rules], indent=2))
    else:
        print(render_rules_table(rules))
    return 0


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.WARNING), format=LOG_FORMAT)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by tests and the ``python -m`` invocation."""

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "scan":
        return _handle_scan(args)
    if args.command == "rules":
        return _handle_rules(args)

    parser.print_help()
    return 0


def run() -> None:  # pragma: no cover - thin wrapper for module execution
    """Execute the CLI and exit with the produced status code."""

    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover - module execution guard
    run()

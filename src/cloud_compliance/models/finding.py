"""Finding models shared across rules and reporting layers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional


class FindingSeverity(IntEnum):
    """Result codes emitted by compliance rules, ordered by gravity."""

    OK = 0
    WARN = 1
    FAIL = 2
    UNKNOWN = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "FindingSeverity":
        """Return the severity matching ``label`` (case-insensitive)."""

        try:
            return cls[label.strip().upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown severity: {label}") from exc


@dataclass(frozen=True, slots=True)
class Finding:
    """A single region-scoped statement produced by a rule."""

    rule_id: str
    severity: FindingSeverity
    message: str
    region: str
    resource: Optional[str] = None
    error: Optional[Any] = None

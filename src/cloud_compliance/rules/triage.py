"""Ordered fault triage applied to fetched collections before correlation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple

from ..adapters import Fetched, FetchFailed, FetchOutcome
from ..models import FindingSeverity


class TriageCondition(str, Enum):
    """Fault conditions a triage check can detect."""

    QUERY_FAILED = "query-failed"
    EMPTY = "empty"


@dataclass(frozen=True, slots=True)
class TriageCheck:
    """One link of the triage chain, bound to a named source."""

    source: str
    label: str
    condition: TriageCondition

    @property
    def severity(self) -> FindingSeverity:
        if self.condition is TriageCondition.QUERY_FAILED:
            return FindingSeverity.UNKNOWN
        return FindingSeverity.FAIL


@dataclass(frozen=True, slots=True)
class TriageVerdict:
    """Outcome of the first triage check that fired."""

    check: TriageCheck
    message: str
    error: Optional[Any] = None

    @property
    def severity(self) -> FindingSeverity:
        return self.check.severity


def build_triage_chain(sources: Sequence[Tuple[str, str]]) -> Tuple[TriageCheck, ...]:
    """Build the check chain for ``(source, label)`` pairs.

    Every query failure check precedes every emptiness check, and within each
    group the sources keep the order they were given in.
    """

    failures = [TriageCheck(source, label, TriageCondition.QUERY_FAILED) for source, label in sources]
    empties = [TriageCheck(source, label, TriageCondition.EMPTY) for source, label in sources]
    return tuple(failures + empties)


def run_triage(
    chain: Sequence[TriageCheck],
    outcomes: Mapping[str, FetchOutcome[Any]],
) -> Optional[TriageVerdict]:
    """Return the verdict of the first failing check, or ``None`` when all pass."""

    for check in chain:
        outcome = outcomes[check.source]

        if check.condition is TriageCondition.QUERY_FAILED:
            if isinstance(outcome, FetchFailed):
                return TriageVerdict(
                    check=check,
                    message=f"Unable to query for {check.label}: {outcome.message}",
                    error=outcome.errors,
                )
        elif isinstance(outcome, Fetched) and not outcome.items:
            return TriageVerdict(check=check, message=f"No {check.label} found")

    return None


__all__ = [
    "TriageCheck",
    "TriageCondition",
    "TriageVerdict",
    "build_triage_chain",
    "run_triage",
]

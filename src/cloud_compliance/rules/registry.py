"""Catalog of the rules available to the scan service."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List

from .base import Rule
from .storage_permissions_logging import StoragePermissionsLogging


class UnknownRuleError(RuntimeError):
    """Raised when a rule id is not registered."""


class RuleRegistry:
    """Registry of rule instances keyed by rule id."""

    def __init__(self, rules: Iterable[Rule] | None = None) -> None:
        self._rules: Dict[str, Rule] = {}
        for rule in rules if rules is not None else default_rules():
            self.register(rule)

    def register(self, rule: Rule) -> None:
        if not rule.rule_id:
            raise ValueError(f"{type(rule).__name__} does not define a rule_id")
        self._rules[rule.rule_id] = rule

    def get(self, rule_id: str) -> Rule:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise UnknownRuleError(f"Unknown rule: {rule_id}") from None

    def ids(self) -> List[str]:
        return sorted(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules[rule_id] for rule_id in self.ids())

    def __len__(self) -> int:
        return len(self._rules)


def default_rules() -> List[Rule]:
    """Return fresh instances of every built-in rule."""

    return [StoragePermissionsLogging()]


__all__ = ["RuleRegistry", "UnknownRuleError", "default_rules"]

"""Declarative rule-set helper.

Not a rule language: just enough structure to attach checks to members, nest
rule-sets for child objects and list elements, and honour member selection.

Usage:
    class AddressRules(RuleSet):
        model_type = Address

        def __init__(self):
            super().__init__()
            self.rule_for("city").not_empty()

    class CustomerRules(RuleSet):
        model_type = Customer

        def __init__(self):
            super().__init__()
            self.rule_for("name").not_empty().must(lambda v: len(v) <= 40, "Name is too long")
            self.rule_for("address").child(AddressRules())
            self.rule_for("orders").each(OrderRules())
"""

import inspect
from collections.abc import Sized
from typing import Any, Awaitable, Callable, Optional, Union

from formbridge.validators.base import BaseRuleSet
from formbridge.validators.context import ValidationContext
from formbridge.validators.models import Severity, ValidationFailure, ValidationResult

# Predicates get (value, instance) and return a bool or an awaitable bool
Predicate = Callable[[Any, Any], Union[bool, Awaitable[bool]]]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Sized):
        return len(value) == 0
    return False


class _Check:
    __slots__ = ("predicate", "message", "severity", "error_code")

    def __init__(self, predicate: Predicate, message: str, severity: Severity, error_code: Optional[str]):
        self.predicate = predicate
        self.message = message
        self.severity = severity
        self.error_code = error_code


class PropertyRule:
    """Checks, child rule-set and per-element rule-set attached to one member."""

    def __init__(self, member: str):
        self.member = member
        self._checks: list[_Check] = []
        self._child: Optional[BaseRuleSet] = None
        self._each: Optional[BaseRuleSet] = None

    # ── Builder ──

    def must(
        self,
        predicate: Predicate,
        message: str,
        severity: Severity = Severity.ERROR,
        error_code: Optional[str] = None,
    ) -> "PropertyRule":
        """Fail with ``message`` when ``predicate(value, instance)`` is falsy."""
        self._checks.append(_Check(predicate, message, severity, error_code))
        return self

    def not_empty(self, message: Optional[str] = None) -> "PropertyRule":
        return self.must(
            lambda value, _: not _is_empty(value),
            message or f"'{self.member}' must not be empty.",
            error_code="not_empty",
        )

    def child(self, rule_set: BaseRuleSet) -> "PropertyRule":
        """Validate the member's value (when present) with ``rule_set``."""
        self._child = rule_set
        return self

    def each(self, rule_set: BaseRuleSet) -> "PropertyRule":
        """Validate every element of the member's sequence with ``rule_set``."""
        self._each = rule_set
        return self

    # ── Execution ──

    async def run(self, context: ValidationContext) -> list[ValidationFailure]:
        instance = context.instance_to_validate
        value = getattr(instance, self.member) if self.member else instance
        failures: list[ValidationFailure] = []

        if context.can_execute(self.member):
            for check in self._checks:
                outcome = check.predicate(value, instance)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
                if not outcome:
                    failures.append(ValidationFailure(
                        property_name=context.build_path(self.member),
                        error_message=check.message,
                        attempted_value=value,
                        severity=check.severity,
                        error_code=check.error_code,
                    ))

        if value is None or not context.should_descend(self.member):
            return failures

        if self._child is not None:
            result = await self._child.validate(context.for_child(value, self.member))
            failures.extend(result.errors)

        if self._each is not None:
            for i, element in enumerate(value):
                if element is None:
                    continue
                result = await self._each.validate(context.for_child(element, self.member, i))
                failures.extend(result.errors)

        return failures


class RuleSet(BaseRuleSet):
    """Rule-set built from ``rule_for`` declarations, run in declaration order."""

    def __init__(self):
        self._rules: list[PropertyRule] = []

    def rule_for(self, member: str) -> PropertyRule:
        """Start a rule for ``member``; ``""`` targets the instance itself."""
        rule = PropertyRule(member)
        self._rules.append(rule)
        return rule

    @property
    def rules(self) -> list[PropertyRule]:
        return list(self._rules)

    async def validate(self, context: ValidationContext) -> ValidationResult:
        failures: list[ValidationFailure] = []
        for rule in self._rules:
            failures.extend(await rule.run(context))
        return self._result(failures)

"""Rule-sets, their contexts and the type registry.

Usage:
    from formbridge.validators import RuleSet, rule_set_registry

    rule_set_registry.register_rule_set(CustomerRules())
"""

from formbridge.validators.base import BaseRuleSet
from formbridge.validators.context import (
    DefaultSelector,
    MemberNameSelector,
    PropertyChain,
    ValidationContext,
)
from formbridge.validators.models import Severity, ValidationFailure, ValidationResult
from formbridge.validators.registry import RuleSetProvider, RuleSetRegistry, rule_set_registry
from formbridge.validators.rules import PropertyRule, RuleSet

__all__ = [
    "BaseRuleSet",
    "RuleSet",
    "PropertyRule",
    "ValidationContext",
    "PropertyChain",
    "DefaultSelector",
    "MemberNameSelector",
    "ValidationFailure",
    "ValidationResult",
    "Severity",
    "RuleSetProvider",
    "RuleSetRegistry",
    "rule_set_registry",
]

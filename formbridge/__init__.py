"""Drive an edit surface's per-field errors from validation rule-sets.

Usage:
    from formbridge import EditContext, rule_set_registry, validation_provider

    rule_set_registry.register_rule_set(CustomerRules())

    context = EditContext(customer)
    validation_provider.initialize_edit_context(context, rule_set_registry)

    if not await context.validate():
        for message in context.get_validation_messages():
            ...
"""

from formbridge.exceptions import (
    FormBridgeError,
    MissingModelError,
    PropertyIndexOutOfRangeError,
    PropertyNotFoundError,
    PropertyPathError,
    PropertyPathParseError,
    PropertyPathTypeError,
)
from formbridge.forms import EditContext, FieldIdentifier, ValidationMessageStore
from formbridge.paths import PathSegment, parse_property_path, resolve_field, resolve_property_path
from formbridge.providers import (
    RuleSetValidationProvider,
    ValidationProperties,
    ValidationProvider,
    validation_provider,
)
from formbridge.validators import (
    BaseRuleSet,
    RuleSet,
    RuleSetRegistry,
    ValidationContext,
    ValidationFailure,
    ValidationResult,
    rule_set_registry,
)

__version__ = "0.1.0"

__all__ = [
    "EditContext",
    "FieldIdentifier",
    "ValidationMessageStore",
    "PathSegment",
    "parse_property_path",
    "resolve_property_path",
    "resolve_field",
    "BaseRuleSet",
    "RuleSet",
    "RuleSetRegistry",
    "rule_set_registry",
    "ValidationContext",
    "ValidationFailure",
    "ValidationResult",
    "ValidationProvider",
    "ValidationProperties",
    "RuleSetValidationProvider",
    "validation_provider",
    "FormBridgeError",
    "MissingModelError",
    "PropertyPathError",
    "PropertyPathParseError",
    "PropertyNotFoundError",
    "PropertyIndexOutOfRangeError",
    "PropertyPathTypeError",
]

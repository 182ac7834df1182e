"""Validation providers that wire rule engines into edit contexts."""

from formbridge.providers.base import ModelTransform, ValidationProperties, ValidationProvider
from formbridge.providers.rule_set_provider import (
    EditContextBinding,
    RuleSetValidationProvider,
    get_bindings,
    validation_provider,
)

__all__ = [
    "ValidationProvider",
    "ValidationProperties",
    "ModelTransform",
    "RuleSetValidationProvider",
    "EditContextBinding",
    "get_bindings",
    "validation_provider",
]

"""Base rule-set — abstract class implementing the Strategy Pattern.

Each rule-set is a standalone, independently testable unit bound to one
model type. New rule-sets are registered without modifying the provider.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from formbridge.validators.context import ValidationContext
from formbridge.validators.models import Severity, ValidationFailure, ValidationResult


class BaseRuleSet(ABC):
    """Abstract base for all rule-sets.

    Contract:
        - validate() is a coroutine and may perform I/O (uniqueness checks etc.)
        - validate() never mutates the instance and keeps no per-run state on
          self, so one instance can run concurrently with itself and others
        - validate() honours ``context.selector`` when the context is restricted
        - failure paths are relative to ``context.root_instance``
    """

    # Type this rule-set validates; used by RuleSetRegistry.register_rule_set
    model_type: ClassVar[Optional[type]] = None

    @property
    def name(self) -> str:
        """Human-readable name for logging."""
        return type(self).__name__

    @abstractmethod
    async def validate(self, context: ValidationContext) -> ValidationResult:
        """Run the rules against ``context.instance_to_validate``.

        Args:
            context: Instance, property chain and member selector

        Returns:
            ValidationResult (empty errors = no issues)
        """
        ...

    # ── Helper Methods ──

    def _failure(
        self,
        context: ValidationContext,
        member: str,
        message: str,
        attempted_value: Any = None,
        severity: Severity = Severity.ERROR,
        error_code: Optional[str] = None,
    ) -> ValidationFailure:
        """Convenience method to create a failure with its full path."""
        return ValidationFailure(
            property_name=context.build_path(member),
            error_message=message,
            attempted_value=attempted_value,
            severity=severity,
            error_code=error_code,
        )

    def _result(self, failures: list[ValidationFailure]) -> ValidationResult:
        return ValidationResult(errors=failures, rule_set=self.name)

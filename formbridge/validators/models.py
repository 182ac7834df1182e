"""Validation models — severity levels, single failures and per-rule-set results.

A failure is not yet localized: ``property_name`` is the dotted/indexed path
relative to the validated object. The provider turns it into a
``FieldIdentifier`` via the path resolver.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Failure severity levels."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationFailure(BaseModel):
    """A single rule violation."""

    model_config = ConfigDict(arbitrary_types_allowed=True, use_enum_values=True)

    property_name: str                  # path relative to the validated object, "" = the object itself
    error_message: str
    attempted_value: Any = None
    severity: Severity = Severity.ERROR
    error_code: Optional[str] = None

    def __str__(self) -> str:
        return self.error_message


class ValidationResult(BaseModel):
    """Everything one rule-set reported for one run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    errors: list[ValidationFailure] = Field(default_factory=list)
    rule_set: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @classmethod
    def merge(cls, results: list["ValidationResult"]) -> "ValidationResult":
        """Concatenate several results; order across rule-sets carries no meaning."""
        return cls(errors=[failure for result in results for failure in result.errors])

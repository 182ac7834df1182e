"""Validation provider contract and the options passed through to providers."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from formbridge.forms.edit_context import EditContext
from formbridge.validators.registry import RuleSetProvider

# Optional pure function: edited model → object that is actually validated
ModelTransform = Callable[[Any], Any]


class ValidationProperties(BaseModel):
    """Provider options carried alongside a context.

    The rule-set provider stores them on the context binding without reading
    them; other providers may use them (e.g. which members count as required).
    """

    model_config = ConfigDict(frozen=True)

    required_properties: frozenset[str] = Field(default_factory=frozenset)
    options: dict[str, Any] = Field(default_factory=dict)


class ValidationProvider(ABC):
    """Wires a validation strategy into an edit context."""

    @abstractmethod
    def initialize_edit_context(
        self,
        edit_context: EditContext,
        rule_provider: RuleSetProvider,
        properties: Optional[ValidationProperties] = None,
        transform_model: Optional[ModelTransform] = None,
    ) -> Any:
        """Subscribe this provider's handlers to ``edit_context``.

        Call exactly once per edit context: a second call registers the
        handlers again and every event is then validated twice.
        """
        ...

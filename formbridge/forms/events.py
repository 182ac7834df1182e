"""Edit-surface event models.

Events are pydantic models so handlers and the event history share one shape.
They carry live objects (the field owner), so they are never serialized.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from formbridge.forms.fields import FieldIdentifier


class BaseEvent(BaseModel):
    """Base model for all edit-context events."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    type: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ValidationRequestedEvent(BaseEvent):
    """Raised by ``EditContext.validate()``: validate the whole model."""

    type: Literal["validation_requested"] = "validation_requested"


class FieldChangedEvent(BaseEvent):
    """Raised when a single field's value changed."""

    type: Literal["field_changed"] = "field_changed"
    field: FieldIdentifier


class ValidationStateChangedEvent(BaseEvent):
    """Raised whenever the set of validation messages may have changed."""

    type: Literal["validation_state_changed"] = "validation_state_changed"


EditContextEvent = ValidationRequestedEvent | FieldChangedEvent | ValidationStateChangedEvent

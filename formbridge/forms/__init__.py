"""Edit-surface side of the bridge: fields, message stores, edit contexts."""

from formbridge.forms.edit_context import EditContext
from formbridge.forms.events import (
    FieldChangedEvent,
    ValidationRequestedEvent,
    ValidationStateChangedEvent,
)
from formbridge.forms.fields import FieldIdentifier
from formbridge.forms.message_store import ValidationMessageStore

__all__ = [
    "EditContext",
    "FieldIdentifier",
    "ValidationMessageStore",
    "ValidationRequestedEvent",
    "FieldChangedEvent",
    "ValidationStateChangedEvent",
]

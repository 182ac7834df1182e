"""The form currently being edited.

Holds the model, tracks modified fields, aggregates messages from the
attached message stores, and raises the three edit-surface events through
its own ``EventBus``.
"""

from typing import TYPE_CHECKING, Any, Optional

import structlog

from formbridge.forms.event_bus import EventBus, EventHandler
from formbridge.forms.events import (
    FieldChangedEvent,
    ValidationRequestedEvent,
    ValidationStateChangedEvent,
)
from formbridge.forms.fields import FieldIdentifier

if TYPE_CHECKING:
    from formbridge.forms.message_store import ValidationMessageStore

logger = structlog.get_logger()


class EditContext:
    """Edit surface wrapping a mutable model.

    Usage:
        context = EditContext(customer)
        provider.initialize_edit_context(context, rule_set_registry)
        await context.notify_field_changed(context.field("name"))
        ok = await context.validate()
    """

    def __init__(self, model: Any, max_event_history: int = 100):
        if model is None:
            raise ValueError("model is required")
        self._model = model
        self._events = EventBus(max_history=max_event_history)
        self._stores: list["ValidationMessageStore"] = []
        self._modified: set[FieldIdentifier] = set()
        # Free-form per-context state for providers (locks, options)
        self.properties: dict[str, Any] = {}

    @property
    def model(self) -> Any:
        return self._model

    @property
    def events(self) -> EventBus:
        return self._events

    def field(self, field_name: str) -> FieldIdentifier:
        """Identifier of a top-level field on the model."""
        return FieldIdentifier(self._model, field_name)

    # ── Subscriptions ──

    def on_validation_requested(self, handler: EventHandler) -> None:
        self._events.subscribe("validation_requested", handler)

    def on_field_changed(self, handler: EventHandler) -> None:
        self._events.subscribe("field_changed", handler)

    def on_validation_state_changed(self, handler: EventHandler) -> None:
        self._events.subscribe("validation_state_changed", handler)

    # ── Notifications ──

    async def validate(self) -> bool:
        """Ask every subscribed provider to validate the whole model.

        Returns:
            True when no store holds any message after the handlers completed.
        """
        await self._events.publish(self, ValidationRequestedEvent())
        valid = self.is_valid()
        logger.debug("edit_context_validated", model_type=type(self._model).__name__, valid=valid)
        return valid

    async def notify_field_changed(self, field: FieldIdentifier) -> None:
        """Mark ``field`` modified and let providers re-validate it."""
        if field is None:
            raise ValueError("field is required")
        self._modified.add(field)
        await self._events.publish(self, FieldChangedEvent(field=field))

    async def notify_validation_state_changed(self) -> None:
        await self._events.publish(self, ValidationStateChangedEvent())

    # ── Messages ──

    def _register_store(self, store: "ValidationMessageStore") -> None:
        self._stores.append(store)

    def get_validation_messages(self, field: Optional[FieldIdentifier] = None) -> list[str]:
        """Messages for one field, or for every field when ``field`` is None."""
        if field is None:
            return [m for store in self._stores for m in store.messages()]
        return [m for store in self._stores for m in store[field]]

    def is_valid(self, field: Optional[FieldIdentifier] = None) -> bool:
        return not self.get_validation_messages(field)

    # ── Modification tracking ──

    def is_modified(self, field: Optional[FieldIdentifier] = None) -> bool:
        if field is None:
            return bool(self._modified)
        return field in self._modified

    def mark_as_unmodified(self, field: Optional[FieldIdentifier] = None) -> None:
        if field is None:
            self._modified.clear()
        else:
            self._modified.discard(field)

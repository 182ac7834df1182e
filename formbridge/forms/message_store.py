"""Per-field error messages owned by one edit context."""

from typing import TYPE_CHECKING, Iterable, Iterator, Optional

from formbridge.forms.fields import FieldIdentifier

if TYPE_CHECKING:
    from formbridge.forms.edit_context import EditContext


class ValidationMessageStore:
    """Holds messages keyed by ``FieldIdentifier``.

    The store attaches itself to its edit context on construction so the
    context can aggregate messages from every store. Mutating a store does
    not notify anyone; the caller decides when to call
    ``EditContext.notify_validation_state_changed()``.
    """

    def __init__(self, edit_context: "EditContext"):
        if edit_context is None:
            raise ValueError("edit_context is required")
        self._edit_context = edit_context
        self._messages: dict[FieldIdentifier, list[str]] = {}
        edit_context._register_store(self)

    @property
    def edit_context(self) -> "EditContext":
        return self._edit_context

    def add(self, field: FieldIdentifier, message: str) -> None:
        """Append ``message`` to ``field``. Duplicates are kept."""
        if field is None:
            raise ValueError("field is required")
        self._messages.setdefault(field, []).append(message)

    def add_range(self, field: FieldIdentifier, messages: Iterable[str]) -> None:
        for message in messages:
            self.add(field, message)

    def clear(self, field: Optional[FieldIdentifier] = None) -> None:
        """Clear one field's messages, or every message when ``field`` is None."""
        if field is None:
            self._messages.clear()
        else:
            self._messages.pop(field, None)

    def __getitem__(self, field: FieldIdentifier) -> list[str]:
        return list(self._messages.get(field, []))

    def __contains__(self, field: object) -> bool:
        return field in self._messages

    def __len__(self) -> int:
        return sum(len(m) for m in self._messages.values())

    def fields(self) -> list[FieldIdentifier]:
        """Fields that currently hold at least one message."""
        return [f for f, m in self._messages.items() if m]

    def messages(self) -> Iterator[str]:
        for field_messages in self._messages.values():
            yield from field_messages

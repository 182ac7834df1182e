"""The (owner object, property name) key of the message store."""

from typing import Any


class FieldIdentifier:
    """Identifies one editable field: a property name on a specific object.

    Equality uses the *identity* of ``model`` and the equality of
    ``field_name``, so two structurally equal objects are still different
    owners, and unhashable models (dataclasses, lists) work as owners.
    """

    __slots__ = ("_model", "_field_name")

    def __init__(self, model: Any, field_name: str):
        if model is None:
            raise ValueError("model is required")
        if field_name is None:
            raise ValueError("field_name is required")
        self._model = model
        self._field_name = field_name

    @property
    def model(self) -> Any:
        return self._model

    @property
    def field_name(self) -> str:
        return self._field_name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldIdentifier):
            return NotImplemented
        return self._model is other._model and self._field_name == other._field_name

    def __hash__(self) -> int:
        return hash((id(self._model), self._field_name))

    def __repr__(self) -> str:
        return f"FieldIdentifier({type(self._model).__name__}@{id(self._model):#x}, {self._field_name!r})"

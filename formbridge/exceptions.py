"""Error taxonomy for the validation bridge.

Null-argument preconditions raise plain ``ValueError``. Everything raised
here propagates out of the validation flow that hit it; nothing is retried.
"""

from typing import Optional


class FormBridgeError(Exception):
    """Base class for all formbridge errors."""


class MissingModelError(FormBridgeError, ValueError):
    """The edit context has no model to validate."""


class PropertyPathError(FormBridgeError):
    """A failure's property path could not be walked on the model graph."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class PropertyPathParseError(PropertyPathError, ValueError):
    """Malformed path syntax, e.g. a non-integer index or an empty segment."""


class PropertyNotFoundError(PropertyPathError, AttributeError):
    """A path segment names a member the current type does not have."""

    def __init__(self, property_name: str, owner_type: Optional[type], path: Optional[str] = None):
        owner = owner_type.__qualname__ if owner_type is not None else "None"
        super().__init__(f"Property '{property_name}' not found on type '{owner}'", path)
        self.property_name = property_name
        self.owner_type = owner_type


class PropertyIndexOutOfRangeError(PropertyPathError, IndexError):
    """An indexed segment points past the end (or before the start) of a sequence."""

    def __init__(self, property_name: str, index: int, length: int, path: Optional[str] = None):
        super().__init__(
            f"Index {index} is out of range for '{property_name}' (length {length})",
            path,
        )
        self.property_name = property_name
        self.index = index
        self.length = length


class PropertyPathTypeError(PropertyPathError, TypeError):
    """An indexed segment was applied to a value that is not an ordered sequence."""

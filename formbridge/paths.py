"""Maps a failure's property path onto the live model graph.

Rule-sets report failures as a flat ``(path, message)`` pair, where the path is
relative to the validated object: ``"name"``, ``"address.city"``,
``"orders[1].total"``. The error store is keyed by ``(owner object, leaf
property name)``, so each path is walked segment by segment down to the object
that actually owns the leaf.

Walk rules:
    - Every segment except the last is looked up on the current object and its
      value becomes the new current object.
    - ``name[i]`` additionally selects element ``i`` of an ordered sequence; the
      element's runtime type governs the next lookup.
    - A plain ``name`` makes the member's *declared* type the next lookup type.
      A ``None`` value is not short-circuited: later segments are still checked
      against the declared type and the resolved parent ends up ``None``.
    - The last segment's name (index syntax stripped) is the leaf.

Parse errors, unknown members, bad indices and indexing a non-sequence all
raise a ``PropertyPathError`` subclass and are never downgraded here.
"""

import re
import types
import typing
from collections.abc import Sequence
from functools import lru_cache
from typing import Any, NamedTuple, Optional

from formbridge.exceptions import (
    PropertyIndexOutOfRangeError,
    PropertyNotFoundError,
    PropertyPathParseError,
    PropertyPathTypeError,
)
from formbridge.forms.fields import FieldIdentifier

_SEGMENT_RE = re.compile(r"^(?P<name>[^\[\]]*)(?:\[(?P<index>[^\[\]]*)\])?$")
_INDEX_RE = re.compile(r"^[+-]?\d+$")


class PathSegment(NamedTuple):
    """One dot-separated piece of a property path."""

    name: str
    index: Optional[int] = None

    def __str__(self) -> str:
        return self.name if self.index is None else f"{self.name}[{self.index}]"


# ── Parsing ──


def _parse_segment(raw: str, path: str) -> PathSegment:
    match = _SEGMENT_RE.match(raw)
    if match is None:
        raise PropertyPathParseError(f"Malformed path segment '{raw}' in '{path}'", path)

    name = match.group("name")
    index_text = match.group("index")
    if index_text is None:
        return PathSegment(name)

    if not name:
        raise PropertyPathParseError(f"Index without a property name in '{path}'", path)
    if not _INDEX_RE.match(index_text.strip()):
        raise PropertyPathParseError(
            f"Cannot parse index '{index_text}' of segment '{raw}' in '{path}'", path
        )
    return PathSegment(name, int(index_text.strip()))


def parse_property_path(path: str) -> list[PathSegment]:
    """Split a dotted/indexed path into segments.

    The empty string is a single empty-named segment addressing the validated
    object itself (model-level failures use it). Inside a multi-segment path an
    empty segment is a parse error.

    Raises:
        PropertyPathParseError: On stray brackets, a non-integer index or ``a..b``.
    """
    if path is None:
        raise PropertyPathParseError("Property path must not be None")

    raw_segments = path.split(".")
    if len(raw_segments) == 1:
        return [_parse_segment(raw_segments[0], path)]

    segments = []
    for raw in raw_segments:
        if not raw:
            raise PropertyPathParseError(f"Empty segment in property path '{path}'", path)
        segments.append(_parse_segment(raw, path))
    return segments


def format_property_path(segments: Sequence[PathSegment]) -> str:
    """Inverse of ``parse_property_path``."""
    return ".".join(str(s) for s in segments)


# ── Type descriptors ──


def _unwrap_optional(annotation: Any) -> Any:
    """``Optional[X]`` / ``X | None`` → ``X``; anything else unchanged."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


@lru_cache(maxsize=None)
def describe_type(cls: type) -> dict[str, Any]:
    """Declared member types of ``cls``, computed once per type.

    Combines class/dataclass/pydantic field annotations with the return
    annotations of ``property`` getters. Members without a usable annotation
    are absent; callers fall back to the runtime value's type.
    """
    members: dict[str, Any] = {}

    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to the raw annotations
        hints = {}
        for klass in reversed(cls.__mro__):
            hints.update(getattr(klass, "__annotations__", {}) or {})

    for name, annotation in hints.items():
        if typing.get_origin(annotation) is typing.ClassVar:
            continue
        members[name] = _unwrap_optional(annotation)

    for klass in cls.__mro__:
        for name, attr in vars(klass).items():
            if name in members or not isinstance(attr, property) or attr.fget is None:
                continue
            try:
                returns = typing.get_type_hints(attr.fget).get("return")
            except (NameError, TypeError):
                returns = None
            if returns is not None:
                members[name] = _unwrap_optional(returns)

    return members


def _declared_type(owner_type: Optional[type], name: str) -> Optional[type]:
    if owner_type is None:
        return None
    declared = describe_type(owner_type).get(name)
    # Generic aliases (list[Order]) still tell us the container class
    origin = typing.get_origin(declared)
    if origin is not None:
        return origin if isinstance(origin, type) else None
    return declared if isinstance(declared, type) else None


def _has_member(owner: Any, owner_type: Optional[type], name: str) -> bool:
    if owner is not None:
        return hasattr(owner, name)
    if owner_type is None:
        return True
    return name in describe_type(owner_type) or hasattr(owner_type, name)


# ── Resolution ──


def resolve_property_path(model: Any, path: str) -> tuple[Optional[Any], str]:
    """Walk ``path`` from ``model`` and return ``(parent, leaf_property_name)``.

    ``parent`` is ``None`` when an intermediate member along the way was absent;
    callers treat that as "cannot localize", not as an error.

    Raises:
        ValueError: If ``model`` is None.
        PropertyPathParseError: Malformed path or index.
        PropertyNotFoundError: A segment names an unknown member.
        PropertyPathTypeError: An index was applied to a non-sequence.
        PropertyIndexOutOfRangeError: The index is outside the sequence.
    """
    if model is None:
        raise ValueError("model is required")

    segments = parse_property_path(path)

    current: Any = model
    current_type: Optional[type] = type(model)

    for segment in segments[:-1]:
        if not _has_member(current, current_type, segment.name):
            raise PropertyNotFoundError(segment.name, current_type, path)

        value = getattr(current, segment.name) if current is not None else None

        if segment.index is None:
            declared = _declared_type(current_type, segment.name)
            current_type = declared or (type(value) if value is not None else None)
            current = value
            continue

        if value is None or isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise PropertyPathTypeError(
                f"'{segment.name}' is not an indexable sequence "
                f"(got {type(value).__name__}) in '{path}'",
                path,
            )
        if not 0 <= segment.index < len(value):
            raise PropertyIndexOutOfRangeError(segment.name, segment.index, len(value), path)

        current = value[segment.index]
        current_type = type(current) if current is not None else None

    return current, segments[-1].name


def resolve_field(model: Any, path: str) -> Optional[FieldIdentifier]:
    """Resolve ``path`` to the ``FieldIdentifier`` the message store is keyed by.

    Returns ``None`` when the parent object is absent.
    """
    parent, property_name = resolve_property_path(model, path)
    if parent is None:
        return None
    return FieldIdentifier(parent, property_name)

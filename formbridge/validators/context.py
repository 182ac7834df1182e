"""The instance being validated plus an optional member restriction.

``PropertyChain`` tracks where a nested rule-set sits relative to the root
object, so failures from child rule-sets carry full paths such as
``orders[1].total``. Selectors decide which rules may execute.
"""

from typing import Any, Iterable, Optional

from formbridge.paths import PathSegment, format_property_path


class PropertyChain:
    """Immutable list of path segments from the root object to the current one."""

    __slots__ = ("_segments",)

    def __init__(self, segments: Optional[Iterable[PathSegment]] = None):
        self._segments = tuple(segments or ())

    def child(self, name: str, index: Optional[int] = None) -> "PropertyChain":
        return PropertyChain(self._segments + (PathSegment(name, index),))

    def build_path(self, member: str) -> str:
        """Full path of ``member`` on the current object."""
        if not self._segments:
            return member
        prefix = format_property_path(self._segments)
        return f"{prefix}.{member}" if member else prefix

    def __len__(self) -> int:
        return len(self._segments)

    def __str__(self) -> str:
        return format_property_path(self._segments)


def _is_below(path: str, ancestor: str) -> bool:
    return path.startswith(ancestor + ".") or path.startswith(ancestor + "[")


class DefaultSelector:
    """Selects every rule."""

    def can_execute(self, path: str) -> bool:
        return True

    def has_selection_below(self, path: str) -> bool:
        return True


class MemberNameSelector:
    """Selects rules by member name.

    A rule at ``path`` executes when a selected name equals it or is one of its
    ancestors (``address`` selects ``address.city``). Rules holding children
    are entered when a selected name lies below them, so ``address.city``
    reaches the city rule without running the address rule's own checks.
    """

    def __init__(self, member_names: Iterable[str]):
        self.member_names = frozenset(member_names)

    def can_execute(self, path: str) -> bool:
        return any(name == path or _is_below(path, name) for name in self.member_names)

    def has_selection_below(self, path: str) -> bool:
        return any(_is_below(name, path) for name in self.member_names)

    def __repr__(self) -> str:
        return f"MemberNameSelector({sorted(self.member_names)!r})"


class ValidationContext:
    """What a rule-set receives: the instance plus scoping information."""

    def __init__(
        self,
        instance_to_validate: Any,
        property_chain: Optional[PropertyChain] = None,
        selector: Optional[Any] = None,
        root_instance: Any = None,
    ):
        self.instance_to_validate = instance_to_validate
        self.property_chain = property_chain or PropertyChain()
        self.selector = selector or DefaultSelector()
        self.root_instance = root_instance if root_instance is not None else instance_to_validate

    @classmethod
    def for_members(cls, instance: Any, member_names: Iterable[str]) -> "ValidationContext":
        """Context restricted to the rules targeting ``member_names``."""
        return cls(instance, selector=MemberNameSelector(member_names))

    @property
    def is_restricted(self) -> bool:
        return not isinstance(self.selector, DefaultSelector)

    def build_path(self, member: str) -> str:
        return self.property_chain.build_path(member)

    def can_execute(self, member: str) -> bool:
        return self.selector.can_execute(self.build_path(member))

    def should_descend(self, member: str) -> bool:
        path = self.build_path(member)
        return self.selector.can_execute(path) or self.selector.has_selection_below(path)

    def for_child(self, instance: Any, member: str, index: Optional[int] = None) -> "ValidationContext":
        """Context for a nested object, sharing the selector and root."""
        return ValidationContext(
            instance,
            property_chain=self.property_chain.child(member, index),
            selector=self.selector,
            root_instance=self.root_instance,
        )

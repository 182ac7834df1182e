"""Explicit mapping from model type to rule-set instances.

Built once at startup and read-only while validations run. Lookup is by the
model's exact runtime type: a rule-set registered for ``Customer`` does not
apply to a ``Customer`` subclass.
"""

from typing import Any, Protocol

import structlog

from formbridge.validators.base import BaseRuleSet

logger = structlog.get_logger()


class RuleSetProvider(Protocol):
    """What the validation provider needs from a rule lookup."""

    def get_applicable_rule_sets(self, model: Any) -> list[BaseRuleSet]:
        ...


class RuleSetRegistry:
    """Type → rule-sets table implementing ``RuleSetProvider``."""

    def __init__(self):
        self._bindings: dict[type, list[BaseRuleSet]] = {}

    def register(self, model_type: type, *rule_sets: BaseRuleSet) -> None:
        """Bind one or more rule-set instances to ``model_type``."""
        if not isinstance(model_type, type):
            raise TypeError(f"model_type must be a type, got {model_type!r}")
        for rule_set in rule_sets:
            if not isinstance(rule_set, BaseRuleSet):
                raise TypeError(f"{rule_set!r} is not a BaseRuleSet")
        self._bindings.setdefault(model_type, []).extend(rule_sets)
        logger.debug(
            "rule_sets_registered",
            model_type=model_type.__qualname__,
            rule_sets=[r.name for r in rule_sets],
        )

    def register_rule_set(self, rule_set: BaseRuleSet) -> None:
        """Bind ``rule_set`` to its declared ``model_type``."""
        if rule_set.model_type is None:
            raise ValueError(f"Rule-set '{rule_set.name}' does not declare a model_type")
        self.register(rule_set.model_type, rule_set)

    def unregister(self, model_type: type) -> None:
        self._bindings.pop(model_type, None)

    def get_applicable_rule_sets(self, model: Any) -> list[BaseRuleSet]:
        """Rule-sets bound to ``type(model)`` (empty list when none)."""
        return list(self._bindings.get(type(model), []))

    def registered_types(self) -> list[type]:
        return list(self._bindings)

    def clear(self) -> None:
        self._bindings.clear()

    def __contains__(self, model_type: object) -> bool:
        return model_type in self._bindings


# Module-level singleton
rule_set_registry = RuleSetRegistry()

"""Rule-set validation provider — drives an edit context's messages from rule-sets.

Two flows, one per edit-context event:

    validation requested → validate_model()
        clear all → notify → transform → run every rule-set → localize every
        failure → add → notify

    field changed → validate_field()
        transform → clear that field → notify → run the rules selected by the
        field name → dedupe → add → notify

Flows on the same context are serialized by a per-context lock, so a field
change arriving while a model validation is in flight waits for it instead of
interleaving writes with it (SERIALIZE_VALIDATION=false restores the
unsynchronized behavior). Every error propagates; a flow that raised leaves
the store cleared but not repopulated, which means "did not complete", not
"valid".
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, Optional

import structlog

from formbridge.config import get_settings
from formbridge.exceptions import MissingModelError
from formbridge.forms.edit_context import EditContext
from formbridge.forms.events import FieldChangedEvent
from formbridge.forms.fields import FieldIdentifier
from formbridge.forms.message_store import ValidationMessageStore
from formbridge.paths import resolve_field
from formbridge.providers.base import ModelTransform, ValidationProperties, ValidationProvider
from formbridge.validators.base import BaseRuleSet
from formbridge.validators.context import ValidationContext
from formbridge.validators.models import ValidationFailure, ValidationResult
from formbridge.validators.registry import RuleSetProvider

logger = structlog.get_logger()

FLOW_LOCK_KEY = "formbridge.validation_lock"
BINDINGS_KEY = "formbridge.bindings"
# the task currently holding the context's flow lock
FLOW_OWNER_KEY = "formbridge.validation_owner"


class EditContextBinding:
    """Everything one ``initialize_edit_context`` call wired up."""

    def __init__(
        self,
        edit_context: EditContext,
        messages: ValidationMessageStore,
        rule_provider: RuleSetProvider,
        properties: ValidationProperties,
        transform_model: Optional[ModelTransform],
    ):
        self.edit_context = edit_context
        self.messages = messages
        self.rule_provider = rule_provider
        self.properties = properties
        self.transform_model = transform_model


class RuleSetValidationProvider(ValidationProvider):
    """Validates edit contexts with the rule-sets a RuleSetProvider returns.

    Args:
        parallel: Run rule-sets concurrently. Defaults to PARALLEL_RULE_SETS.
        serialize: Serialize flows per context. Defaults to SERIALIZE_VALIDATION.
        unresolved_policy: "drop" or "model" for failures whose parent object
            is absent. Defaults to UNRESOLVED_FAILURE_POLICY.
    """

    def __init__(
        self,
        parallel: Optional[bool] = None,
        serialize: Optional[bool] = None,
        unresolved_policy: Optional[str] = None,
    ):
        settings = get_settings()
        self.parallel = settings.PARALLEL_RULE_SETS if parallel is None else parallel
        self.serialize = settings.SERIALIZE_VALIDATION if serialize is None else serialize
        self.unresolved_policy = unresolved_policy or settings.UNRESOLVED_FAILURE_POLICY
        if self.unresolved_policy not in ("drop", "model"):
            raise ValueError(f"Unknown unresolved failure policy: {self.unresolved_policy!r}")

    # ── Wiring ──

    def initialize_edit_context(
        self,
        edit_context: EditContext,
        rule_provider: RuleSetProvider,
        properties: Optional[ValidationProperties] = None,
        transform_model: Optional[ModelTransform] = None,
    ) -> EditContextBinding:
        """Create the context's message store and subscribe both flows.

        Returns:
            The binding (message store, provider, properties, transform).
        """
        if edit_context is None:
            raise ValueError("edit_context is required")
        if rule_provider is None:
            raise ValueError("rule_provider is required")
        properties = properties or ValidationProperties()

        messages = ValidationMessageStore(edit_context)
        binding = EditContextBinding(edit_context, messages, rule_provider, properties, transform_model)
        edit_context.properties.setdefault(BINDINGS_KEY, []).append(binding)

        async def on_validation_requested(sender: EditContext, event: Any) -> None:
            await self.validate_model(sender, messages, rule_provider, transform_model)

        async def on_field_changed(sender: EditContext, event: FieldChangedEvent) -> None:
            await self.validate_field(sender, messages, event.field, rule_provider, transform_model)

        edit_context.on_validation_requested(on_validation_requested)
        edit_context.on_field_changed(on_field_changed)

        logger.debug(
            "edit_context_initialized",
            model_type=type(edit_context.model).__name__,
            transformed=transform_model is not None,
        )
        return binding

    # ── Flows ──

    async def validate_model(
        self,
        edit_context: EditContext,
        messages: ValidationMessageStore,
        rule_provider: RuleSetProvider,
        transform: Optional[ModelTransform] = None,
    ) -> None:
        """Validate the whole model and republish every message.

        Raises:
            ValueError: A required argument is None (before any mutation).
            MissingModelError: The context has no model (before any mutation).
            PropertyPathError: A failure path could not be resolved.
            Exception: Whatever a rule-set raised.
        """
        self._check_preconditions(edit_context, messages, rule_provider)

        async with self._serialized(edit_context):
            start_time = time.perf_counter()
            try:
                messages.clear()
                await edit_context.notify_validation_state_changed()

                transformed = self.get_transformed_model(edit_context.model, transform)
                rule_sets = rule_provider.get_applicable_rule_sets(transformed)
                failures = await self._run_rule_sets(rule_sets, ValidationContext(transformed))

                # Localize everything first: a bad path must not leave a half-filled store
                located = self._localize(transformed, failures)
                for field, message in located:
                    messages.add(field, message)
            except Exception as e:
                logger.error("validation_flow_failed", flow="model", error=str(e), error_type=type(e).__name__)
                raise

            await edit_context.notify_validation_state_changed()

            logger.info(
                "model_validation_complete",
                model_type=type(transformed).__name__,
                rule_sets=len(rule_sets),
                total_failures=len(failures),
                localized=len(located),
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )

    async def validate_field(
        self,
        edit_context: EditContext,
        messages: ValidationMessageStore,
        field: FieldIdentifier,
        rule_provider: RuleSetProvider,
        transform: Optional[ModelTransform] = None,
    ) -> None:
        """Re-validate one field and replace its messages.

        Only rules selected by ``field.field_name`` run; every failure they
        report is attached to ``field`` itself, duplicates removed.
        """
        self._check_preconditions(edit_context, messages, rule_provider)
        if field is None:
            raise ValueError("field is required")

        async with self._serialized(edit_context):
            start_time = time.perf_counter()
            try:
                transformed = self.get_transformed_model(edit_context.model, transform)
                context = ValidationContext.for_members(transformed, [field.field_name])

                messages.clear(field)
                await edit_context.notify_validation_state_changed()

                rule_sets = rule_provider.get_applicable_rule_sets(transformed)
                failures = await self._run_rule_sets(rule_sets, context)

                error_messages = list(dict.fromkeys(f.error_message for f in failures))
                messages.add_range(field, error_messages)
            except Exception as e:
                logger.error(
                    "validation_flow_failed",
                    flow="field",
                    field=field.field_name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            await edit_context.notify_validation_state_changed()

            logger.info(
                "field_validation_complete",
                field=field.field_name,
                rule_sets=len(rule_sets),
                messages=len(error_messages),
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )

    # ── Internals ──

    @staticmethod
    def get_transformed_model(model: Any, transform: Optional[ModelTransform] = None) -> Any:
        """The object to validate: ``transform(model)`` or the model itself."""
        return transform(model) if transform is not None else model

    @staticmethod
    def _check_preconditions(
        edit_context: EditContext,
        messages: ValidationMessageStore,
        rule_provider: RuleSetProvider,
    ) -> None:
        if edit_context is None:
            raise ValueError("edit_context is required")
        if messages is None:
            raise ValueError("messages is required")
        if rule_provider is None:
            raise ValueError("rule_provider is required")
        if getattr(edit_context, "model", None) is None:
            raise MissingModelError("edit_context.model")

    @asynccontextmanager
    async def _serialized(self, edit_context: EditContext):
        """Hold the context's flow lock for the duration of one flow.

        A flow started from inside another flow of the same context (e.g. an
        observer of validation_state_changed raising field_changed) runs
        inline instead of deadlocking on the lock it is already under. Only
        the owning task counts: a task spawned during the flow queues on the
        lock like any other caller.
        """
        current = asyncio.current_task()
        owner = edit_context.properties.get(FLOW_OWNER_KEY)
        if not self.serialize or (current is not None and owner is current):
            yield
            return

        lock = edit_context.properties.setdefault(FLOW_LOCK_KEY, asyncio.Lock())
        async with lock:
            edit_context.properties[FLOW_OWNER_KEY] = current
            try:
                yield
            finally:
                edit_context.properties.pop(FLOW_OWNER_KEY, None)

    async def _run_rule_sets(
        self,
        rule_sets: list[BaseRuleSet],
        context: ValidationContext,
    ) -> list[ValidationFailure]:
        """Run every rule-set against ``context`` and flatten their failures."""
        timings: dict[str, float] = {}

        async def run_one(rule_set: BaseRuleSet) -> ValidationResult:
            start = time.perf_counter()
            try:
                return await rule_set.validate(context)
            finally:
                timings[rule_set.name] = round((time.perf_counter() - start) * 1000, 2)

        if self.parallel and len(rule_sets) > 1:
            tasks = [asyncio.ensure_future(run_one(r)) for r in rule_sets]
            try:
                results = await asyncio.gather(*tasks)
            except BaseException:
                # no rule-set may outlive the failed flow
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
        else:
            results = [await run_one(r) for r in rule_sets]

        logger.debug(
            "rule_set_timings",
            restricted=context.is_restricted,
            rule_set_timings=timings,
        )
        return ValidationResult.merge(list(results)).errors

    def _localize(
        self,
        model: Any,
        failures: list[ValidationFailure],
    ) -> list[tuple[FieldIdentifier, str]]:
        """Resolve each failure's path to the field it belongs to."""
        located: list[tuple[FieldIdentifier, str]] = []
        for failure in failures:
            field = resolve_field(model, failure.property_name)
            if field is None:
                if self.unresolved_policy == "model":
                    field = FieldIdentifier(model, "")
                else:
                    logger.warning(
                        "failure_unlocalized",
                        path=failure.property_name,
                        message=failure.error_message,
                    )
                    continue
            located.append((field, failure.error_message))
        return located


def get_bindings(edit_context: EditContext) -> list[EditContextBinding]:
    """Bindings created on ``edit_context`` by ``initialize_edit_context``."""
    return list(edit_context.properties.get(BINDINGS_KEY, []))


# Module-level singleton
validation_provider = RuleSetValidationProvider()

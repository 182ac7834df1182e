"""Event bus — in-process pub/sub between an edit context and its handlers."""

import inspect
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Union

import structlog

from formbridge.forms.events import BaseEvent, EditContextEvent

logger = structlog.get_logger()

# Handlers receive (sender, event) and may be plain functions or coroutines
EventHandler = Callable[[Any, EditContextEvent], Union[None, Awaitable[None]]]


class EventBus:
    """Per-context pub/sub keyed by event type.

    Handlers run in subscription order and are awaited one after another.
    A failing handler is NOT removed and its exception propagates to the
    publisher: validation flows must surface their errors to the host.
    """

    def __init__(self, max_history: int = 100):
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._event_history: List[BaseEvent] = []
        self._max_history = max_history

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe a handler to one event type. Subscribing twice runs it twice."""
        self._handlers[event_type].append(handler)
        logger.debug("event_bus_subscribe", event_type=event_type, total_handlers=len(self._handlers[event_type]))

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        """Remove one registration of ``handler`` (no-op if absent)."""
        handlers = self._handlers.get(event_type)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._handlers[event_type]

    def handler_count(self, event_type: str) -> int:
        return len(self._handlers.get(event_type, []))

    async def publish(self, sender: Any, event: BaseEvent) -> None:
        """Record ``event`` and deliver it to every handler of its type."""
        self._event_history.append(event)
        if len(self._event_history) > self._max_history:
            self._event_history = self._event_history[-self._max_history:]

        # Snapshot so handlers may (un)subscribe while we iterate
        for handler in list(self._handlers.get(event.type, [])):
            try:
                result = handler(sender, event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("event_handler_failed", event_type=event.type, error=str(e))
                raise

    def get_history(self) -> list[BaseEvent]:
        """Recent events, oldest first."""
        return list(self._event_history)

    def clear_history(self) -> None:
        self._event_history.clear()

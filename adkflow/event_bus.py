"""In-process publish/subscribe bus for tool lifecycle events."""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Callable, Mapping, Union


class EventType(str, Enum):
    """Predefined event types published by executors."""

    TOOL_CALLED = "tool_called"
    TOOL_ERROR = "tool_error"
    TOOL_RESULT_RECEIVED = "tool_result_received"


EventHandler = Callable[[Union[EventType, str], Mapping[str, Any]], None]


def _key(event_type: Union[EventType, str]) -> str:
    if isinstance(event_type, EventType):
        return event_type.value
    return str(event_type)


class EventBus:
    """Thread-safe registry of handlers keyed by event type."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._lock = threading.RLock()

    def subscribe(self, event_type: Union[EventType, str], handler: EventHandler) -> None:
        """Register ``handler`` to be called for ``event_type``."""
        with self._lock:
            self._handlers.setdefault(_key(event_type), []).append(handler)

    def unsubscribe(self, event_type: Union[EventType, str], handler: EventHandler) -> None:
        """Remove every registration of ``handler`` for ``event_type``."""
        key = _key(event_type)
        with self._lock:
            handlers = self._handlers.get(key)
            if handlers is None:
                return
            self._handlers[key] = [h for h in handlers if h != handler]

    def publish(self, event_type: Union[EventType, str], data: Mapping[str, Any]) -> None:
        """Call every handler subscribed to ``event_type``, in subscription order."""
        with self._lock:
            handlers = list(self._handlers.get(_key(event_type), ()))
        for handler in handlers:
            handler(event_type, data)


_default_bus = EventBus()


def subscribe(event_type: Union[EventType, str], handler: EventHandler) -> None:
    """Register a handler on the process-wide bus."""
    _default_bus.subscribe(event_type, handler)


def unsubscribe(event_type: Union[EventType, str], handler: EventHandler) -> None:
    """Remove a handler from the process-wide bus."""
    _default_bus.unsubscribe(event_type, handler)


def publish(event_type: Union[EventType, str], data: Mapping[str, Any]) -> None:
    """Publish an event on the process-wide bus."""
    _default_bus.publish(event_type, data)
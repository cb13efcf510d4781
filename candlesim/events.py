import logging
from abc import ABC
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

log = logging.getLogger(__name__)


def event(cls):
    return dataclass(frozen=True, slots=True)(cls)


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainEvent(ABC):
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class EventDispatcher:
    """Synchronous event dispatcher for domain events.

    The simulator runs on a single execution context, so handlers are plain
    callables invoked in subscription order. Exceptions in handlers are logged
    but don't stop dispatch to other handlers.
    """

    def __init__(self):
        self._handlers: dict[type[DomainEvent], list[Callable]] = defaultdict(list)

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: Callable[[DomainEvent], None],
    ):
        """Register a handler for an event type.

        Args:
            event_type: The event class to subscribe to
            handler: Callable that accepts the event
        """
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type[DomainEvent], handler: Callable):
        """Unregister a handler from an event type."""
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def publish(self, event: DomainEvent):
        """Dispatch event to all handlers registered for its exact type.

        Args:
            event: The domain event to dispatch
        """
        for handler in list(self._handlers[type(event)]):
            try:
                handler(event)
            except Exception as e:
                log.error(
                    "Event handler %s failed for %s: %s",
                    getattr(handler, "__name__", repr(handler)),
                    event.__class__.__name__,
                    e,
                    exc_info=True,
                )


# Lazy singleton
_dispatcher: EventDispatcher | None = None


def get_dispatcher() -> EventDispatcher:
    """Get the global event dispatcher instance."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = EventDispatcher()
    return _dispatcher

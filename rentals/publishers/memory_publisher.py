"""In-process event publisher that keeps a record of what it delivered."""

import logging
import threading
from collections import defaultdict

from rentals.domain.events import DomainEvent
from rentals.publishers.interfaces import EventHandler, EventPublisher

logger = logging.getLogger(__name__)


class InMemoryEventPublisher(EventPublisher):
    """Calls subscribers synchronously and records every published event.

    A handler that raises is logged and skipped; the remaining handlers
    still receive the event.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)
        self._global_handlers: list[EventHandler] = []
        self._published: list[DomainEvent] = []

    @property
    def published_events(self) -> list[DomainEvent]:
        with self._lock:
            return list(self._published)

    def events_of_type(self, event_type: type[DomainEvent]) -> list[DomainEvent]:
        return [event for event in self.published_events if isinstance(event, event_type)]

    def clear(self) -> None:
        with self._lock:
            self._published.clear()

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        with self._lock:
            self._handlers[event_type].append(handler)

    def subscribe_to_all(self, handler: EventHandler) -> None:
        with self._lock:
            self._global_handlers.append(handler)

    def publish(self, event: DomainEvent) -> None:
        with self._lock:
            self._published.append(event)
            handlers = [*self._handlers.get(type(event), []), *self._global_handlers]
        logger.info(
            "Publishing %s for %s", event.event_type, event.aggregate_id,
            extra={"event": event.to_payload()},
        )
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %r failed for %s %s", handler, event.event_type, event.event_id
                )

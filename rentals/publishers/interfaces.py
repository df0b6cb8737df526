"""Event publisher interface.

Services publish the events an operation returned once its new state has been
saved. Delivery problems never undo that state.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

from rentals.domain.events import DomainEvent

EventHandler = Callable[[DomainEvent], None]


class EventPublisher(ABC):
    """Interface for delivering domain events to subscribers."""

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """Deliver one event to every handler subscribed to its type."""
        ...

    def publish_many(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            self.publish(event)

    @abstractmethod
    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        ...

    @abstractmethod
    def subscribe_to_all(self, handler: EventHandler) -> None:
        ...

from rentals.publishers.interfaces import EventHandler, EventPublisher
from rentals.publishers.memory_publisher import InMemoryEventPublisher
from rentals.publishers.signal_publisher import SignalEventPublisher

__all__ = [
    "EventHandler",
    "EventPublisher",
    "InMemoryEventPublisher",
    "SignalEventPublisher",
]

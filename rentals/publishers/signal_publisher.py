"""Event publisher backed by Django signals."""

import logging

from django.dispatch import Signal

from rentals.domain.events import DomainEvent
from rentals.publishers.interfaces import EventHandler, EventPublisher
from rentals.signals import domain_event_published

logger = logging.getLogger(__name__)


class SignalEventPublisher(EventPublisher):
    """Sends events through a Django signal.

    Receivers are called with ``send_robust``: an exception in one receiver
    is logged and the others still run.
    """

    def __init__(self, signal: Signal = domain_event_published) -> None:
        self._signal = signal

    def publish(self, event: DomainEvent) -> None:
        responses = self._signal.send_robust(sender=type(event), event=event)
        for handler, response in responses:
            if isinstance(response, Exception):
                logger.error(
                    "Receiver %r failed for %s %s",
                    handler, event.event_type, event.event_id,
                    exc_info=response,
                )

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        self._signal.connect(_adapt(handler), sender=event_type, weak=False)

    def subscribe_to_all(self, handler: EventHandler) -> None:
        self._signal.connect(_adapt(handler), weak=False)


def _adapt(handler: EventHandler):
    def receive(sender, event, **kwargs):
        handler(event)

    return receive

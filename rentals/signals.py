"""Django signal carrying published domain events.

``SignalEventPublisher`` sends every event through ``domain_event_published``
with the event class as sender, so receivers can listen to one event type or
to all of them.
"""

import logging

from django.dispatch import Signal, receiver

logger = logging.getLogger(__name__)

domain_event_published = Signal()


@receiver(domain_event_published)
def audit_domain_event(sender, event, **kwargs):
    """Write every published event to the audit log."""
    logger.debug("Domain event %s", event.event_type, extra={"event": event.to_payload()})

"""Helpers shared by the application services."""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import TypeVar

from rentals.domain import DomainEvent
from rentals.domain.errors import InvalidIdentifierError
from rentals.domain.value_objects import Identifier
from rentals.publishers import EventPublisher

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

IdT = TypeVar("IdT", bound=Identifier)


def parse_id(id_type: type[IdT], value: str | IdT, kind: str) -> IdT:
    """Parse an identifier received at the service boundary.

    Raises:
        InvalidIdentifierError: If ``value`` is not a valid UUID.
    """
    if isinstance(value, id_type):
        return value
    try:
        return id_type.from_string(value)
    except (AttributeError, TypeError, ValueError) as exc:
        raise InvalidIdentifierError(kind, str(value)) from exc


def publish_events(publisher: EventPublisher, events: Iterable[DomainEvent]) -> None:
    """Publish events for state that is already saved.

    A publishing failure is logged and swallowed: the saved state stays.
    """
    for event in events:
        try:
            publisher.publish(event)
        except Exception:
            logger.exception("Failed to publish %s %s", event.event_type, event.event_id)

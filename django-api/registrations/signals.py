"""Django signals for cache invalidation.

Keys are dropped once the surrounding transaction commits, so a read served
mid-transaction cannot leave uncommitted or rolled back counts in the cache.
"""

import typing as t

import structlog
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from registrations import cache
from registrations.models import Event, Registration, TicketType

logger = structlog.get_logger(__name__)


def _invalidate_on_commit(event_id: t.Any) -> None:
    def invalidate() -> None:
        cache.invalidate_event(event_id)
        logger.debug("event_cache_invalidated", event_id=str(event_id))

    transaction.on_commit(invalidate)


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender: type[Event], instance: Event, **kwargs: t.Any) -> None:
    """Invalidate list, detail and capacity caches when an event is saved or deleted."""
    _invalidate_on_commit(instance.pk)


@receiver([post_save, post_delete], sender=TicketType)
def invalidate_ticket_type_cache(
    sender: type[TicketType], instance: TicketType, **kwargs: t.Any
) -> None:
    """Ticket types are embedded in the event detail, so the whole event goes."""
    _invalidate_on_commit(instance.event_id)


@receiver(post_save, sender=Registration)
def invalidate_capacity_cache(
    sender: type[Registration], instance: Registration, **kwargs: t.Any
) -> None:
    """Any status change moves the confirmed counts."""
    _invalidate_on_commit(instance.event_id)

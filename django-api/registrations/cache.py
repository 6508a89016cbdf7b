"""Cache keys for the read endpoints.

Values are serialized response bodies. Signals in registrations/signals.py
drop the keys when the underlying rows change.
"""

from django.conf import settings
from django.core.cache import cache

from registrations.models import Event

EVENT_LIST_KEY = "events:list"


def event_list_key(status: str | None = None) -> str:
    return f"{EVENT_LIST_KEY}:{status}" if status else EVENT_LIST_KEY


def event_detail_key(event_id: object) -> str:
    return f"events:{event_id}"


def ticket_types_key(event_id: object) -> str:
    return f"events:{event_id}:ticket_types"


def capacity_key(event_id: object) -> str:
    return f"events:{event_id}:capacity"


def timeout() -> int:
    return settings.EVENT_CACHE_TIMEOUT


def invalidate_event_lists() -> None:
    cache.delete_many([event_list_key(), *(event_list_key(status) for status in Event.Status.values)])


def invalidate_event(event_id: object) -> None:
    """Drop every cached view derived from one event."""
    invalidate_event_lists()
    cache.delete_many([event_detail_key(event_id), ticket_types_key(event_id), capacity_key(event_id)])

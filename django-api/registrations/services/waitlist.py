"""Per (event, ticket type) FIFO waitlist.

Order is decided by position alone. Positions are assigned as max + 1 and
never renumbered, so removals leave gaps.
"""

from collections.abc import Callable
from datetime import datetime

import structlog
from django.utils import timezone

from registrations.domain import (
    Attendee,
    EventId,
    TicketTypeId,
    WaitlistEntry,
    WaitlistEntryId,
)
from registrations.stores.interfaces import WaitlistStore

logger = structlog.get_logger(__name__)


class WaitlistQueue:
    def __init__(self, store: WaitlistStore, clock: Callable[[], datetime] = timezone.now) -> None:
        self._store = store
        self._clock = clock

    def enqueue(
        self,
        event_id: EventId,
        ticket_type_id: TicketTypeId,
        attendee: Attendee,
        discount_code: str | None = None,
    ) -> WaitlistEntry:
        """Append an attendee to the back of the queue.

        The caller must hold the inventory lock so that position assignment
        and insert happen without interleaving.
        """
        position = self._store.next_position(event_id, ticket_type_id)
        entry = self._store.add(
            WaitlistEntry(
                id=WaitlistEntryId.new(),
                event_id=event_id,
                ticket_type_id=ticket_type_id,
                attendee=attendee,
                position=position,
                joined_date=self._clock(),
                discount_code=discount_code,
            )
        )
        logger.info(
            "waitlist_entry_enqueued",
            event_id=str(event_id),
            ticket_type_id=str(ticket_type_id),
            position=position,
        )
        return entry

    def peek_next(self, event_id: EventId, ticket_type_id: TicketTypeId) -> WaitlistEntry | None:
        return self._store.peek_next(event_id, ticket_type_id)

    def get(self, entry_id: WaitlistEntryId) -> WaitlistEntry | None:
        return self._store.get(entry_id)

    def remove(self, entry_id: WaitlistEntryId) -> None:
        self._store.remove(entry_id)

    def entries(
        self, event_id: EventId, ticket_type_id: TicketTypeId | None = None
    ) -> list[WaitlistEntry]:
        return self._store.list_entries(event_id, ticket_type_id)

    def entry_for(
        self, event_id: EventId, ticket_type_id: TicketTypeId, email: str
    ) -> WaitlistEntry | None:
        return self._store.find_by_email(event_id, ticket_type_id, email)

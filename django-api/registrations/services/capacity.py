"""Live capacity accounting.

Only Confirmed registrations consume capacity; Waitlisted and Cancelled rows
are ignored. Every answer is read from the store at call time, so callers must
ask again rather than reuse an earlier result.
"""

from registrations.domain import (
    CapacitySnapshot,
    Event,
    EventId,
    TicketType,
    TicketTypeCapacity,
    TicketTypeId,
)
from registrations.domain.errors import EventNotFoundError, TicketTypeNotFoundError
from registrations.stores.interfaces import EventStore, RegistrationStore


class CapacityTracker:
    """Answers "is there room?" for a ticket type and its event."""

    def __init__(self, events: EventStore, registrations: RegistrationStore) -> None:
        self._events = events
        self._registrations = registrations

    def confirmed_count_for_ticket_type(self, ticket_type_id: TicketTypeId) -> int:
        return self._registrations.count_confirmed_for_ticket_type(ticket_type_id)

    def confirmed_count_for_event(self, event_id: EventId) -> int:
        return self._registrations.count_confirmed_for_event(event_id)

    def has_capacity(self, ticket_type_id: TicketTypeId, event_id: EventId) -> bool:
        """Return True when both the ticket type and the event have a free slot.

        Raises:
            EventNotFoundError: If the event does not exist.
            TicketTypeNotFoundError: If the ticket type does not exist.
        """
        event = self._events.get_event(event_id)
        if event is None:
            raise EventNotFoundError()
        ticket_type = self._events.get_ticket_type(ticket_type_id)
        if ticket_type is None:
            raise TicketTypeNotFoundError()
        return self.has_room(ticket_type, event)

    def has_room(self, ticket_type: TicketType, event: Event) -> bool:
        return (
            self.has_ticket_type_capacity(ticket_type)
            and self.confirmed_count_for_event(event.id) < event.overall_capacity.value
        )

    def has_ticket_type_capacity(self, ticket_type: TicketType) -> bool:
        """Ticket-type check alone; promotion does not re-check the event-wide limit."""
        return self.confirmed_count_for_ticket_type(ticket_type.id) < ticket_type.capacity.value

    def snapshot(self, event: Event) -> CapacitySnapshot:
        ticket_types = tuple(
            TicketTypeCapacity(
                ticket_type_id=ticket_type.id,
                name=ticket_type.name,
                capacity=ticket_type.capacity.value,
                confirmed=self.confirmed_count_for_ticket_type(ticket_type.id),
            )
            for ticket_type in self._events.list_ticket_types(event.id)
        )
        return CapacitySnapshot(
            event_id=event.id,
            overall_capacity=event.overall_capacity.value,
            confirmed=self.confirmed_count_for_event(event.id),
            ticket_types=ticket_types,
        )

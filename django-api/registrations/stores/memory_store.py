"""In-process implementation of the stores.

Backs the service unit tests. One re-entrant lock serializes every atomic
block, and each block restores the previous state when it raises.
"""

import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field, replace

from registrations.domain import (
    CancellationPolicy,
    DiscountCode,
    DiscountCodeId,
    Event,
    EventId,
    EventStatus,
    Registration,
    RegistrationId,
    RegistrationStatus,
    TicketType,
    TicketTypeId,
    WaitlistEntry,
    WaitlistEntryId,
)
from registrations.stores.interfaces import (
    DiscountCodeStore,
    EventStore,
    RegistrationStore,
    Stores,
    UnitOfWork,
    WaitlistStore,
)


@dataclass
class MemoryState:
    events: dict[EventId, Event] = field(default_factory=dict)
    ticket_types: dict[TicketTypeId, TicketType] = field(default_factory=dict)
    policies: dict[EventId, CancellationPolicy] = field(default_factory=dict)
    registrations: dict[RegistrationId, Registration] = field(default_factory=dict)
    waitlist: dict[WaitlistEntryId, WaitlistEntry] = field(default_factory=dict)
    discount_codes: dict[DiscountCodeId, DiscountCode] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock)

    _TABLES = ("events", "ticket_types", "policies", "registrations", "waitlist", "discount_codes")

    def snapshot(self) -> dict[str, dict]:
        return {name: dict(getattr(self, name)) for name in self._TABLES}

    def restore(self, snapshot: dict[str, dict]) -> None:
        for name, table in snapshot.items():
            setattr(self, name, table)


class InMemoryEventStore(EventStore):
    def __init__(self, state: MemoryState) -> None:
        self._state = state

    def list_events(self, status: EventStatus | None = None) -> list[Event]:
        events = [e for e in self._state.events.values() if status is None or e.status is status]
        return sorted(events, key=lambda e: e.created_at, reverse=True)

    def get_event(self, event_id: EventId) -> Event | None:
        return self._state.events.get(event_id)

    def save_event(self, event: Event) -> Event:
        existing = self._state.events.get(event.id)
        stored = replace(event, created_at=existing.created_at) if existing else event
        self._state.events[event.id] = stored
        return stored

    def delete_event(self, event_id: EventId) -> None:
        self._state.events.pop(event_id, None)
        for ticket_type in self.list_ticket_types(event_id):
            self._state.ticket_types.pop(ticket_type.id, None)
        self._state.policies.pop(event_id, None)

    def list_ticket_types(self, event_id: EventId) -> list[TicketType]:
        matching = [t for t in self._state.ticket_types.values() if t.event_id == event_id]
        return sorted(matching, key=lambda t: t.created_at)

    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        return self._state.ticket_types.get(ticket_type_id)

    def save_ticket_type(self, ticket_type: TicketType) -> TicketType:
        self._state.ticket_types[ticket_type.id] = ticket_type
        return ticket_type

    def delete_ticket_type(self, ticket_type_id: TicketTypeId) -> None:
        self._state.ticket_types.pop(ticket_type_id, None)

    def get_cancellation_policy(self, event_id: EventId) -> CancellationPolicy | None:
        return self._state.policies.get(event_id)

    def save_cancellation_policy(self, policy: CancellationPolicy) -> CancellationPolicy:
        self._state.policies[policy.event_id] = policy
        return policy


class InMemoryRegistrationStore(RegistrationStore):
    def __init__(self, state: MemoryState) -> None:
        self._state = state

    def _matching(self, **criteria: object) -> list[Registration]:
        rows = [
            r
            for r in self._state.registrations.values()
            if all(getattr(r, name) == value for name, value in criteria.items())
        ]
        return sorted(rows, key=lambda r: r.registration_date)

    def get(self, registration_id: RegistrationId) -> Registration | None:
        return self._state.registrations.get(registration_id)

    def save(self, registration: Registration) -> Registration:
        self._state.registrations[registration.id] = registration
        return registration

    def list_for_event(self, event_id: EventId) -> list[Registration]:
        return self._matching(event_id=event_id)

    def list_by_email(self, email: str) -> list[Registration]:
        return self._matching(email=email)

    def email_registered(self, event_id: EventId, email: str) -> bool:
        return bool(self._matching(event_id=event_id, email=email))

    def find_waitlisted(self, event_id: EventId, email: str) -> Registration | None:
        rows = self._matching(event_id=event_id, email=email, status=RegistrationStatus.WAITLISTED)
        return rows[0] if rows else None

    def count_confirmed_for_ticket_type(self, ticket_type_id: TicketTypeId) -> int:
        return len(self._matching(ticket_type_id=ticket_type_id, status=RegistrationStatus.CONFIRMED))

    def count_confirmed_for_event(self, event_id: EventId) -> int:
        return len(self._matching(event_id=event_id, status=RegistrationStatus.CONFIRMED))

    def exists_for_event(self, event_id: EventId) -> bool:
        return bool(self._matching(event_id=event_id))

    def exists_for_ticket_type(self, ticket_type_id: TicketTypeId) -> bool:
        return bool(self._matching(ticket_type_id=ticket_type_id))


class InMemoryWaitlistStore(WaitlistStore):
    def __init__(self, state: MemoryState) -> None:
        self._state = state

    def next_position(self, event_id: EventId, ticket_type_id: TicketTypeId) -> int:
        positions = [e.position for e in self.list_entries(event_id, ticket_type_id)]
        return max(positions, default=0) + 1

    def add(self, entry: WaitlistEntry) -> WaitlistEntry:
        taken = {e.position for e in self.list_entries(entry.event_id, entry.ticket_type_id)}
        if entry.position in taken:
            raise ValueError(f"Waitlist position {entry.position} is already taken")
        self._state.waitlist[entry.id] = entry
        return entry

    def peek_next(self, event_id: EventId, ticket_type_id: TicketTypeId) -> WaitlistEntry | None:
        entries = self.list_entries(event_id, ticket_type_id)
        return entries[0] if entries else None

    def get(self, entry_id: WaitlistEntryId) -> WaitlistEntry | None:
        return self._state.waitlist.get(entry_id)

    def remove(self, entry_id: WaitlistEntryId) -> None:
        self._state.waitlist.pop(entry_id, None)

    def list_entries(
        self, event_id: EventId, ticket_type_id: TicketTypeId | None = None
    ) -> list[WaitlistEntry]:
        entries = [
            e
            for e in self._state.waitlist.values()
            if e.event_id == event_id and (ticket_type_id is None or e.ticket_type_id == ticket_type_id)
        ]
        return sorted(entries, key=lambda e: e.position)

    def find_by_email(
        self, event_id: EventId, ticket_type_id: TicketTypeId, email: str
    ) -> WaitlistEntry | None:
        for entry in self.list_entries(event_id, ticket_type_id):
            if entry.attendee.email == email:
                return entry
        return None


class InMemoryDiscountCodeStore(DiscountCodeStore):
    def __init__(self, state: MemoryState) -> None:
        self._state = state

    def find_by_code(self, event_id: EventId, code: str) -> DiscountCode | None:
        wanted = code.strip().casefold()
        for discount_code in self._state.discount_codes.values():
            if discount_code.event_id == event_id and discount_code.code.casefold() == wanted:
                return discount_code
        return None

    def get(self, discount_code_id: DiscountCodeId) -> DiscountCode | None:
        return self._state.discount_codes.get(discount_code_id)

    def list_for_event(self, event_id: EventId) -> list[DiscountCode]:
        codes = [d for d in self._state.discount_codes.values() if d.event_id == event_id]
        return sorted(codes, key=lambda d: d.code)

    def save(self, discount_code: DiscountCode) -> DiscountCode:
        existing = self._state.discount_codes.get(discount_code.id)
        if existing is not None:
            discount_code = replace(discount_code, current_uses=existing.current_uses)
        self._state.discount_codes[discount_code.id] = discount_code
        return discount_code

    def delete(self, discount_code_id: DiscountCodeId) -> None:
        self._state.discount_codes.pop(discount_code_id, None)

    def increment_uses(self, discount_code_id: DiscountCodeId) -> bool:
        with self._state.lock:
            discount_code = self._state.discount_codes.get(discount_code_id)
            if discount_code is None or discount_code.is_exhausted:
                return False
            self._state.discount_codes[discount_code_id] = replace(
                discount_code, current_uses=discount_code.current_uses + 1
            )
            return True


class InMemoryUnitOfWork(UnitOfWork):
    def __init__(self, state: MemoryState) -> None:
        self._state = state

    def atomic(self) -> AbstractContextManager[None]:
        return self._atomic()

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        with self._state.lock:
            snapshot = self._state.snapshot()
            try:
                yield
            except BaseException:
                self._state.restore(snapshot)
                raise

    def lock_inventory(self, event_id: EventId, ticket_type_id: TicketTypeId) -> None:
        # atomic() already holds the global lock.
        return None


def memory_stores(state: MemoryState | None = None) -> Stores:
    state = state or MemoryState()
    return Stores(
        events=InMemoryEventStore(state),
        registrations=InMemoryRegistrationStore(state),
        waitlist=InMemoryWaitlistStore(state),
        discount_codes=InMemoryDiscountCodeStore(state),
        unit_of_work=InMemoryUnitOfWork(state),
    )

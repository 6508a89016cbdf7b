"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass

from registrations.domain import (
    CancellationPolicy,
    DiscountCode,
    DiscountCodeId,
    Event,
    EventId,
    EventStatus,
    Registration,
    RegistrationId,
    TicketType,
    TicketTypeId,
    WaitlistEntry,
    WaitlistEntryId,
)


class EventStore(ABC):
    """Interface for event, ticket type and cancellation policy persistence."""

    @abstractmethod
    def list_events(self, status: EventStatus | None = None) -> list[Event]:
        """Return events ordered by created_at descending, optionally filtered by status."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def save_event(self, event: Event) -> Event:
        """Insert or update an event."""
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> None: ...

    @abstractmethod
    def list_ticket_types(self, event_id: EventId) -> list[TicketType]:
        """Return the ticket types of an event, oldest first."""
        ...

    @abstractmethod
    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None: ...

    @abstractmethod
    def save_ticket_type(self, ticket_type: TicketType) -> TicketType: ...

    @abstractmethod
    def delete_ticket_type(self, ticket_type_id: TicketTypeId) -> None: ...

    @abstractmethod
    def get_cancellation_policy(self, event_id: EventId) -> CancellationPolicy | None: ...

    @abstractmethod
    def save_cancellation_policy(self, policy: CancellationPolicy) -> CancellationPolicy: ...


class RegistrationStore(ABC):
    """Interface for registration persistence operations."""

    @abstractmethod
    def get(self, registration_id: RegistrationId) -> Registration | None: ...

    @abstractmethod
    def save(self, registration: Registration) -> Registration:
        """Insert or update a registration. Rows are never deleted."""
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[Registration]:
        """Return the registrations of an event ordered by registration_date."""
        ...

    @abstractmethod
    def list_by_email(self, email: str) -> list[Registration]: ...

    @abstractmethod
    def email_registered(self, event_id: EventId, email: str) -> bool:
        """Check whether any registration for the event uses this email, cancelled ones included."""
        ...

    @abstractmethod
    def find_waitlisted(self, event_id: EventId, email: str) -> Registration | None:
        """Return the Waitlisted registration shadowing a waitlist entry."""
        ...

    @abstractmethod
    def count_confirmed_for_ticket_type(self, ticket_type_id: TicketTypeId) -> int: ...

    @abstractmethod
    def count_confirmed_for_event(self, event_id: EventId) -> int: ...

    @abstractmethod
    def exists_for_event(self, event_id: EventId) -> bool: ...

    @abstractmethod
    def exists_for_ticket_type(self, ticket_type_id: TicketTypeId) -> bool: ...


class WaitlistStore(ABC):
    """Interface for waitlist persistence operations."""

    @abstractmethod
    def next_position(self, event_id: EventId, ticket_type_id: TicketTypeId) -> int:
        """Return max(position) + 1 for the queue, or 1 when it is empty."""
        ...

    @abstractmethod
    def add(self, entry: WaitlistEntry) -> WaitlistEntry: ...

    @abstractmethod
    def peek_next(self, event_id: EventId, ticket_type_id: TicketTypeId) -> WaitlistEntry | None:
        """Return the lowest-position entry of the queue."""
        ...

    @abstractmethod
    def get(self, entry_id: WaitlistEntryId) -> WaitlistEntry | None: ...

    @abstractmethod
    def remove(self, entry_id: WaitlistEntryId) -> None: ...

    @abstractmethod
    def list_entries(
        self, event_id: EventId, ticket_type_id: TicketTypeId | None = None
    ) -> list[WaitlistEntry]:
        """Return entries ordered by position."""
        ...

    @abstractmethod
    def find_by_email(
        self, event_id: EventId, ticket_type_id: TicketTypeId, email: str
    ) -> WaitlistEntry | None: ...


class DiscountCodeStore(ABC):
    """Interface for discount code persistence operations."""

    @abstractmethod
    def find_by_code(self, event_id: EventId, code: str) -> DiscountCode | None:
        """Return the event's code matching case-insensitively."""
        ...

    @abstractmethod
    def get(self, discount_code_id: DiscountCodeId) -> DiscountCode | None: ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[DiscountCode]: ...

    @abstractmethod
    def save(self, discount_code: DiscountCode) -> DiscountCode:
        """Insert or update a code. current_uses is only changed by increment_uses."""
        ...

    @abstractmethod
    def delete(self, discount_code_id: DiscountCodeId) -> None: ...

    @abstractmethod
    def increment_uses(self, discount_code_id: DiscountCodeId) -> bool:
        """Atomically add one use unless max_uses is already reached.

        Returns False when the increment was refused.
        """
        ...


class UnitOfWork(ABC):
    """Transaction boundary shared by all stores."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Return a block whose writes commit together or not at all."""
        ...

    @abstractmethod
    def lock_inventory(self, event_id: EventId, ticket_type_id: TicketTypeId) -> None:
        """Serialize capacity check-then-act for the event until the block ends."""
        ...


@dataclass(frozen=True)
class Stores:
    events: EventStore
    registrations: RegistrationStore
    waitlist: WaitlistStore
    discount_codes: DiscountCodeStore
    unit_of_work: UnitOfWork

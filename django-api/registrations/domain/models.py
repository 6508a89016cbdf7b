"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in registrations/models.py (persistence layer).
Entities reference their parents by id only; stores answer the reverse queries.
"""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Self

from registrations.domain.value_objects import (
    CancellationPolicyId,
    Capacity,
    DiscountCodeId,
    EventId,
    Money,
    RegistrationId,
    TicketTypeId,
    WaitlistEntryId,
)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class EventStatus(Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class RegistrationStatus(Enum):
    CONFIRMED = "Confirmed"
    WAITLISTED = "Waitlisted"
    CANCELLED = "Cancelled"
    # Reserved; nothing transitions into it yet.
    REFUNDED = "Refunded"


class DiscountType(Enum):
    PERCENTAGE = "Percentage"
    FIXED_AMOUNT = "FixedAmount"


class DiscountStatus(Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    EXPIRED = "Expired"


ALLOWED_TRANSITIONS: dict[RegistrationStatus, frozenset[RegistrationStatus]] = {
    RegistrationStatus.CONFIRMED: frozenset({RegistrationStatus.CANCELLED}),
    RegistrationStatus.WAITLISTED: frozenset(
        {RegistrationStatus.CONFIRMED, RegistrationStatus.CANCELLED}
    ),
    RegistrationStatus.CANCELLED: frozenset(),
    RegistrationStatus.REFUNDED: frozenset(),
}


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    name: str
    description: str
    venue_name: str
    venue_address: str
    start_date: datetime
    end_date: datetime
    overall_capacity: Capacity
    registration_deadline: datetime | None
    status: EventStatus
    created_at: datetime
    updated_at: datetime

    @property
    def is_published(self) -> bool:
        return self.status is EventStatus.PUBLISHED


@dataclass(frozen=True)
class TicketType:
    """Domain representation of a TicketType."""

    id: TicketTypeId
    event_id: EventId
    name: str
    description: str
    price: Money
    capacity: Capacity
    available_from: datetime | None
    available_until: datetime | None
    created_at: datetime


@dataclass(frozen=True)
class Attendee:
    """Contact details shared by registrations and waitlist entries."""

    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None

    def __post_init__(self) -> None:
        if not self.first_name.strip() or not self.last_name.strip():
            raise ValueError("First name and last name are required")
        if not self.email or not EMAIL_PATTERN.match(self.email):
            raise ValueError("Valid email is required")


@dataclass(frozen=True)
class Registration:
    """Domain representation of a Registration."""

    id: RegistrationId
    event_id: EventId
    ticket_type_id: TicketTypeId
    attendee: Attendee
    registration_date: datetime
    status: RegistrationStatus
    total_amount: Money
    discount_code_used: str | None = None

    @property
    def email(self) -> str:
        return self.attendee.email

    def transition_to(self, status: RegistrationStatus, *, at: datetime | None = None) -> Self:
        """Return a copy in the new status.

        Raises:
            ValueError: If the status change is not an allowed transition.
        """
        if status not in ALLOWED_TRANSITIONS[self.status]:
            raise ValueError(f"Cannot move registration from {self.status.value} to {status.value}")
        if at is None:
            return replace(self, status=status)
        return replace(self, status=status, registration_date=at)


@dataclass(frozen=True)
class WaitlistEntry:
    """Domain representation of a WaitlistEntry."""

    id: WaitlistEntryId
    event_id: EventId
    ticket_type_id: TicketTypeId
    attendee: Attendee
    position: int
    joined_date: datetime
    promotion_expiry: datetime | None = None
    discount_code: str | None = None


@dataclass(frozen=True)
class DiscountCode:
    """Domain representation of a DiscountCode."""

    id: DiscountCodeId
    event_id: EventId
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    max_uses: int | None
    current_uses: int
    valid_from: datetime
    valid_until: datetime
    status: DiscountStatus = DiscountStatus.ACTIVE
    applicable_ticket_type_ids: tuple[TicketTypeId, ...] = ()

    @property
    def is_exhausted(self) -> bool:
        return self.max_uses is not None and self.current_uses >= self.max_uses

    def is_valid_at(self, moment: datetime) -> bool:
        return self.valid_from <= moment <= self.valid_until

    def applies_to(self, ticket_type_id: TicketTypeId) -> bool:
        return not self.applicable_ticket_type_ids or ticket_type_id in self.applicable_ticket_type_ids


@dataclass(frozen=True)
class CancellationPolicy:
    """Domain representation of a CancellationPolicy.

    Thresholds are assumed ordered full >= partial >= no-refund; nothing
    enforces it.
    """

    id: CancellationPolicyId
    event_id: EventId
    full_refund_deadline_days: int
    partial_refund_deadline_days: int
    partial_refund_percentage: int
    no_refund_after_days: int
    cancellation_fee: Money | None = None


@dataclass(frozen=True)
class RefundDecision:
    amount: Money
    reason: str


@dataclass(frozen=True)
class CancellationResult:
    registration_id: RegistrationId
    status: RegistrationStatus
    refund_amount: Money
    refund_reason: str
    promoted: Registration | None = None


@dataclass(frozen=True)
class TicketTypeCapacity:
    ticket_type_id: TicketTypeId
    name: str
    capacity: int
    confirmed: int

    @property
    def available(self) -> int:
        return self.capacity - self.confirmed


@dataclass(frozen=True)
class CapacitySnapshot:
    event_id: EventId
    overall_capacity: int
    confirmed: int
    ticket_types: tuple[TicketTypeCapacity, ...] = field(default=())

    @property
    def available(self) -> int:
        return self.overall_capacity - self.confirmed

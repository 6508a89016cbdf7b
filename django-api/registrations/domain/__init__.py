from registrations.domain.models import (
    Attendee,
    CancellationPolicy,
    CancellationResult,
    CapacitySnapshot,
    DiscountCode,
    DiscountStatus,
    DiscountType,
    Event,
    EventStatus,
    RefundDecision,
    Registration,
    RegistrationStatus,
    TicketType,
    TicketTypeCapacity,
    WaitlistEntry,
)
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

__all__ = [
    "Attendee",
    "CancellationPolicy",
    "CancellationResult",
    "CapacitySnapshot",
    "DiscountCode",
    "DiscountStatus",
    "DiscountType",
    "Event",
    "EventStatus",
    "RefundDecision",
    "Registration",
    "RegistrationStatus",
    "TicketType",
    "TicketTypeCapacity",
    "WaitlistEntry",
    "CancellationPolicyId",
    "Capacity",
    "DiscountCodeId",
    "EventId",
    "Money",
    "RegistrationId",
    "TicketTypeId",
    "WaitlistEntryId",
]

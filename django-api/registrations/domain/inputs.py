"""Already-parsed request payloads handed from handlers to services."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class RegistrationRequest:
    first_name: str
    last_name: str
    email: str
    ticket_type_id: str
    phone_number: str | None = None
    discount_code: str | None = None


@dataclass(frozen=True)
class EventDetails:
    name: str
    start_date: datetime
    end_date: datetime
    overall_capacity: int
    status: str = "Draft"
    description: str = ""
    venue_name: str = ""
    venue_address: str = ""
    registration_deadline: datetime | None = None


@dataclass(frozen=True)
class TicketTypeDetails:
    name: str
    price: Decimal
    capacity: int
    description: str = ""
    available_from: datetime | None = None
    available_until: datetime | None = None


@dataclass(frozen=True)
class DiscountCodeDetails:
    code: str
    discount_type: str
    discount_value: Decimal
    valid_from: datetime
    valid_until: datetime
    max_uses: int | None = None
    applicable_ticket_type_ids: tuple[str, ...] = ()
    status: str = "Active"


@dataclass(frozen=True)
class CancellationPolicyTerms:
    full_refund_deadline_days: int
    partial_refund_deadline_days: int
    partial_refund_percentage: int
    no_refund_after_days: int
    cancellation_fee: Decimal | None = None

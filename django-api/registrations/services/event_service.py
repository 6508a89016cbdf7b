"""Event catalog service.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Catalog writes are plain CRUD with the organizer rules applied; registration
state is never touched here.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TypeVar

import structlog
from django.utils import timezone

from registrations.domain import (
    CancellationPolicy,
    CancellationPolicyId,
    Capacity,
    DiscountCode,
    DiscountCodeId,
    DiscountStatus,
    DiscountType,
    Event,
    EventId,
    EventStatus,
    Money,
    TicketType,
    TicketTypeId,
)
from registrations.domain.errors import (
    CancellationPolicyExistsError,
    CancellationPolicyNotFoundError,
    CapacityLimitError,
    DiscountCodeInUseError,
    DiscountCodeNotFoundError,
    DuplicateDiscountCodeError,
    EventNotFoundError,
    InvalidInputError,
    RegistrationsExistError,
    TicketTypeNotFoundError,
)
from registrations.domain.inputs import (
    CancellationPolicyTerms,
    DiscountCodeDetails,
    EventDetails,
    TicketTypeDetails,
)
from registrations.services.identifiers import parse_id
from registrations.stores.interfaces import Stores

logger = structlog.get_logger(__name__)

EnumT = TypeVar("EnumT", bound=Enum)


def _parse_choice(enum_type: type[EnumT], raw: str, label: str) -> EnumT:
    try:
        return enum_type(raw)
    except ValueError as exc:
        raise InvalidInputError(f"Unknown {label}: {raw}") from exc


class EventService:
    """Service for event catalog operations."""

    def __init__(self, stores: Stores, clock: Callable[[], datetime] = timezone.now) -> None:
        self._events = stores.events
        self._registrations = stores.registrations
        self._discount_codes = stores.discount_codes
        self._clock = clock

    # Events

    def list_events(self, status: str | None = None) -> list[Event]:
        """Return all events, newest first, optionally only those in one status."""
        wanted = _parse_choice(EventStatus, status, "event status") if status else None
        return self._events.list_events(wanted)

    def get_event(self, event_id: str | EventId) -> Event:
        """Return an event by ID.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = self._events.get_event(parse_id(EventId, event_id, "event ID"))
        if event is None:
            raise EventNotFoundError()
        return event

    def create_event(self, details: EventDetails) -> Event:
        self._check_event_details(details)
        now = self._clock()
        event = self._events.save_event(
            Event(
                id=EventId.new(),
                name=details.name,
                description=details.description,
                venue_name=details.venue_name,
                venue_address=details.venue_address,
                start_date=details.start_date,
                end_date=details.end_date,
                overall_capacity=Capacity(details.overall_capacity),
                registration_deadline=details.registration_deadline,
                status=_parse_choice(EventStatus, details.status, "event status"),
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("event_created", event_id=str(event.id), status=event.status.value)
        return event

    def update_event(self, event_id: str, details: EventDetails) -> Event:
        """Replace an event's details.

        Raises:
            InvalidInputError: If the dates or capacity are inconsistent.
            RegistrationsExistError: If dates change after someone registered.
            CapacityLimitError: If capacity drops below the ticket types already on sale.
        """
        event = self.get_event(event_id)
        self._check_event_details(details)
        dates_changed = (
            details.start_date != event.start_date
            or details.end_date != event.end_date
            or details.registration_deadline != event.registration_deadline
        )
        if dates_changed and self._registrations.exists_for_event(event.id):
            raise RegistrationsExistError("Cannot modify event dates when registrations exist")
        allocated = sum(tt.capacity.value for tt in self._events.list_ticket_types(event.id))
        if details.overall_capacity < allocated:
            raise CapacityLimitError("Overall capacity cannot be less than the sum of ticket type capacities")

        updated = self._events.save_event(
            replace(
                event,
                name=details.name,
                description=details.description,
                venue_name=details.venue_name,
                venue_address=details.venue_address,
                start_date=details.start_date,
                end_date=details.end_date,
                overall_capacity=Capacity(details.overall_capacity),
                registration_deadline=details.registration_deadline,
                status=_parse_choice(EventStatus, details.status, "event status"),
                updated_at=self._clock(),
            )
        )
        logger.info("event_updated", event_id=str(updated.id), status=updated.status.value)
        return updated

    def delete_event(self, event_id: str) -> None:
        event = self.get_event(event_id)
        if self._registrations.exists_for_event(event.id):
            raise RegistrationsExistError("Cannot delete event with existing registrations")
        self._events.delete_event(event.id)
        logger.info("event_deleted", event_id=str(event.id))

    @staticmethod
    def _check_event_details(details: EventDetails) -> None:
        if not details.name.strip():
            raise InvalidInputError("Event name is required")
        if details.end_date <= details.start_date:
            raise InvalidInputError("End date must be after start date")
        if details.registration_deadline is not None and details.registration_deadline >= details.start_date:
            raise InvalidInputError("Registration deadline must be before event start date")
        if details.overall_capacity <= 0:
            raise InvalidInputError("Overall capacity must be positive")

    # Ticket types

    def list_ticket_types(self, event_id: str) -> list[TicketType]:
        return self._events.list_ticket_types(self.get_event(event_id).id)

    def get_ticket_type(self, event_id: str, ticket_type_id: str) -> TicketType:
        """Return a ticket type of the event.

        Raises:
            TicketTypeNotFoundError: If it does not exist or belongs to another event.
        """
        return self._ticket_type_of(self.get_event(event_id), ticket_type_id)

    def create_ticket_type(self, event_id: str, details: TicketTypeDetails) -> TicketType:
        event = self.get_event(event_id)
        self._check_ticket_type_details(event, details, allocated=self._allocated_capacity(event))
        ticket_type = self._events.save_ticket_type(
            TicketType(
                id=TicketTypeId.new(),
                event_id=event.id,
                name=details.name,
                description=details.description,
                price=Money(details.price),
                capacity=Capacity(details.capacity),
                available_from=details.available_from,
                available_until=details.available_until,
                created_at=self._clock(),
            )
        )
        logger.info("ticket_type_created", event_id=str(event.id), ticket_type_id=str(ticket_type.id))
        return ticket_type

    def update_ticket_type(
        self, event_id: str, ticket_type_id: str, details: TicketTypeDetails
    ) -> TicketType:
        event = self.get_event(event_id)
        ticket_type = self._ticket_type_of(event, ticket_type_id)
        confirmed = self._registrations.count_confirmed_for_ticket_type(ticket_type.id)
        if details.capacity < confirmed:
            raise CapacityLimitError("Cannot reduce capacity below current registration count")
        self._check_ticket_type_details(
            event, details, allocated=self._allocated_capacity(event, excluding=ticket_type.id)
        )
        updated = self._events.save_ticket_type(
            replace(
                ticket_type,
                name=details.name,
                description=details.description,
                price=Money(details.price),
                capacity=Capacity(details.capacity),
                available_from=details.available_from,
                available_until=details.available_until,
            )
        )
        logger.info("ticket_type_updated", event_id=str(event.id), ticket_type_id=str(updated.id))
        return updated

    def delete_ticket_type(self, event_id: str, ticket_type_id: str) -> None:
        ticket_type = self.get_ticket_type(event_id, ticket_type_id)
        if self._registrations.exists_for_ticket_type(ticket_type.id):
            raise RegistrationsExistError("Cannot delete ticket type with existing registrations")
        self._events.delete_ticket_type(ticket_type.id)
        logger.info("ticket_type_deleted", ticket_type_id=str(ticket_type.id))

    def _ticket_type_of(self, event: Event, ticket_type_id: str | TicketTypeId) -> TicketType:
        ticket_type = self._events.get_ticket_type(parse_id(TicketTypeId, ticket_type_id, "ticket type ID"))
        if ticket_type is None or ticket_type.event_id != event.id:
            raise TicketTypeNotFoundError()
        return ticket_type

    def _allocated_capacity(self, event: Event, excluding: TicketTypeId | None = None) -> int:
        return sum(
            tt.capacity.value for tt in self._events.list_ticket_types(event.id) if tt.id != excluding
        )

    @staticmethod
    def _check_ticket_type_details(event: Event, details: TicketTypeDetails, allocated: int) -> None:
        if not details.name.strip():
            raise InvalidInputError("Ticket type name is required")
        if details.price < 0:
            raise InvalidInputError("Price cannot be negative")
        if details.capacity <= 0:
            raise InvalidInputError("Capacity must be positive")
        if allocated + details.capacity > event.overall_capacity.value:
            raise CapacityLimitError("Sum of ticket type capacities cannot exceed event capacity")
        if details.available_until is not None and details.available_until > event.start_date:
            raise InvalidInputError("Available until date must be before or at event start")

    # Discount codes

    def list_discount_codes(self, event_id: str) -> list[DiscountCode]:
        return self._discount_codes.list_for_event(self.get_event(event_id).id)

    def get_discount_code(self, event_id: str, discount_code_id: str) -> DiscountCode:
        return self._discount_code_of(self.get_event(event_id), discount_code_id)

    def create_discount_code(self, event_id: str, details: DiscountCodeDetails) -> DiscountCode:
        event = self.get_event(event_id)
        discount_code = self._build_discount_code(event, DiscountCodeId.new(), details)
        if self._discount_codes.find_by_code(event.id, discount_code.code) is not None:
            raise DuplicateDiscountCodeError()
        saved = self._discount_codes.save(discount_code)
        logger.info("discount_code_created", event_id=str(event.id), code=saved.code)
        return saved

    def update_discount_code(
        self, event_id: str, discount_code_id: str, details: DiscountCodeDetails
    ) -> DiscountCode:
        event = self.get_event(event_id)
        existing = self._discount_code_of(event, discount_code_id)
        discount_code = self._build_discount_code(event, existing.id, details)
        clash = self._discount_codes.find_by_code(event.id, discount_code.code)
        if clash is not None and clash.id != existing.id:
            raise DuplicateDiscountCodeError()
        saved = self._discount_codes.save(replace(discount_code, current_uses=existing.current_uses))
        logger.info("discount_code_updated", event_id=str(event.id), code=saved.code)
        return saved

    def delete_discount_code(self, event_id: str, discount_code_id: str) -> None:
        discount_code = self.get_discount_code(event_id, discount_code_id)
        if discount_code.current_uses > 0:
            raise DiscountCodeInUseError()
        self._discount_codes.delete(discount_code.id)
        logger.info("discount_code_deleted", code=discount_code.code)

    def _discount_code_of(self, event: Event, discount_code_id: str) -> DiscountCode:
        key = parse_id(DiscountCodeId, discount_code_id, "discount code ID")
        discount_code = self._discount_codes.get(key)
        if discount_code is None or discount_code.event_id != event.id:
            raise DiscountCodeNotFoundError()
        return discount_code

    def _build_discount_code(
        self, event: Event, discount_code_id: DiscountCodeId, details: DiscountCodeDetails
    ) -> DiscountCode:
        code = details.code.strip()
        if not code:
            raise InvalidInputError("Discount code is required")
        discount_type = _parse_choice(DiscountType, details.discount_type, "discount type")
        value = Decimal(details.discount_value)
        if discount_type is DiscountType.PERCENTAGE and not Decimal(0) <= value <= Decimal(100):
            raise InvalidInputError("Percentage discount must be between 0 and 100")
        if value < 0:
            raise InvalidInputError("Discount value cannot be negative")
        if details.valid_until < details.valid_from:
            raise InvalidInputError("Valid until must not be before valid from")
        applicable = tuple(
            self._ticket_type_of(event, raw).id for raw in details.applicable_ticket_type_ids
        )
        return DiscountCode(
            id=discount_code_id,
            event_id=event.id,
            code=code,
            discount_type=discount_type,
            discount_value=value,
            max_uses=details.max_uses,
            current_uses=0,
            valid_from=details.valid_from,
            valid_until=details.valid_until,
            status=_parse_choice(DiscountStatus, details.status, "discount status"),
            applicable_ticket_type_ids=applicable,
        )

    # Cancellation policy

    def get_cancellation_policy(self, event_id: str) -> CancellationPolicy:
        policy = self._events.get_cancellation_policy(self.get_event(event_id).id)
        if policy is None:
            raise CancellationPolicyNotFoundError()
        return policy

    def create_cancellation_policy(self, event_id: str, terms: CancellationPolicyTerms) -> CancellationPolicy:
        event = self.get_event(event_id)
        if self._events.get_cancellation_policy(event.id) is not None:
            raise CancellationPolicyExistsError()
        policy = self._events.save_cancellation_policy(
            self._build_policy(CancellationPolicyId.new(), event.id, terms)
        )
        logger.info("cancellation_policy_created", event_id=str(event.id))
        return policy

    def update_cancellation_policy(self, event_id: str, terms: CancellationPolicyTerms) -> CancellationPolicy:
        existing = self.get_cancellation_policy(event_id)
        policy = self._events.save_cancellation_policy(
            self._build_policy(existing.id, existing.event_id, terms)
        )
        logger.info("cancellation_policy_updated", event_id=str(policy.event_id))
        return policy

    @staticmethod
    def _build_policy(
        policy_id: CancellationPolicyId, event_id: EventId, terms: CancellationPolicyTerms
    ) -> CancellationPolicy:
        if not 0 <= terms.partial_refund_percentage <= 100:
            raise InvalidInputError("Partial refund percentage must be between 0 and 100")
        days = (
            terms.full_refund_deadline_days,
            terms.partial_refund_deadline_days,
            terms.no_refund_after_days,
        )
        if any(value < 0 for value in days):
            raise InvalidInputError("Refund deadlines cannot be negative")
        if terms.cancellation_fee is not None and terms.cancellation_fee < 0:
            raise InvalidInputError("Cancellation fee cannot be negative")
        return CancellationPolicy(
            id=policy_id,
            event_id=event_id,
            full_refund_deadline_days=terms.full_refund_deadline_days,
            partial_refund_deadline_days=terms.partial_refund_deadline_days,
            partial_refund_percentage=terms.partial_refund_percentage,
            no_refund_after_days=terms.no_refund_after_days,
            cancellation_fee=Money(terms.cancellation_fee) if terms.cancellation_fee is not None else None,
        )

"""Registration admission and waitlist promotion.

The coordinator is the only writer of Registration.status and of waitlist
rows. Each public mutation runs in one atomic block and holds the inventory
lock for the event while it checks capacity and writes, so two requests for
the last slot cannot both see room.

    register:  validate -> price (discount) -> capacity -> Confirmed | Waitlisted
    cancel:    refund -> Cancelled -> promote(event, ticket type)
    promote:   lowest position -> ticket type capacity -> Confirmed
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta

import structlog
from django.utils import timezone

from registrations.domain import (
    Attendee,
    CancellationResult,
    CapacitySnapshot,
    Event,
    EventId,
    Money,
    Registration,
    RegistrationId,
    RegistrationStatus,
    TicketType,
    TicketTypeId,
    WaitlistEntry,
    WaitlistEntryId,
)
from registrations.domain.errors import (
    AlreadyCancelledError,
    DeadlinePassedError,
    DuplicateEmailError,
    EventNotFoundError,
    EventNotPublishedError,
    InvalidDiscountError,
    InvalidInputError,
    RegistrationNotFoundError,
    TicketTypeNotFoundError,
    WaitlistEntryNotFoundError,
)
from registrations.domain.inputs import RegistrationRequest
from registrations.services.cancellation import CancellationPolicyEvaluator
from registrations.services.capacity import CapacityTracker
from registrations.services.discounts import DiscountEngine, DiscountResult
from registrations.services.identifiers import parse_id
from registrations.services.waitlist import WaitlistQueue
from registrations.stores.interfaces import Stores

logger = structlog.get_logger(__name__)

RECENT_DEADLINE_WINDOW = timedelta(days=2)
FAR_FROM_START_WINDOW = timedelta(days=7)


def registration_closed(event: Event, now: datetime) -> bool:
    """Apply the registration deadline.

    Once the deadline has passed it is enforced only while it is recent
    (under two days ago) or the event is still more than seven days away;
    otherwise late registrations are let through.
    """
    deadline = event.registration_deadline
    if deadline is None or now <= deadline:
        return False
    return (
        (now - deadline) < RECENT_DEADLINE_WINDOW
        or (event.start_date - now) > FAR_FROM_START_WINDOW
    )


class RegistrationCoordinator:
    """Orchestrates capacity, discounts, waitlist and refunds for one request."""

    def __init__(self, stores: Stores, clock: Callable[[], datetime] = timezone.now) -> None:
        self._events = stores.events
        self._registrations = stores.registrations
        self._unit_of_work = stores.unit_of_work
        self._clock = clock
        self.capacity = CapacityTracker(stores.events, stores.registrations)
        self.discounts = DiscountEngine(stores.discount_codes, stores.events, clock)
        self.waitlist = WaitlistQueue(stores.waitlist, clock)
        self.refunds = CancellationPolicyEvaluator(clock)

    def register(self, event_id: str | EventId, request: RegistrationRequest) -> Registration:
        """Admit an attendee, or waitlist them when there is no room.

        Raises:
            InvalidInputError: If names or email are malformed.
            InvalidIdError: If an identifier is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            EventNotPublishedError: If the event is not Published.
            DeadlinePassedError: If the registration deadline applies.
            TicketTypeNotFoundError: If the ticket type is missing or belongs to another event.
            DuplicateEmailError: If the email already registered for the event.
            InvalidDiscountError: If a supplied discount code cannot be applied.
        """
        try:
            attendee = Attendee(
                first_name=request.first_name,
                last_name=request.last_name,
                email=request.email.strip(),
                phone_number=request.phone_number or None,
            )
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc
        event_key = parse_id(EventId, event_id, "event ID")
        ticket_type_key = parse_id(TicketTypeId, request.ticket_type_id, "ticket type ID")
        code = (request.discount_code or "").strip() or None

        with self._unit_of_work.atomic():
            now = self._clock()
            event = self._require_event(event_key)
            if not event.is_published:
                raise EventNotPublishedError()
            if registration_closed(event, now):
                raise DeadlinePassedError()
            ticket_type = self._events.get_ticket_type(ticket_type_key)
            if ticket_type is None or ticket_type.event_id != event.id:
                raise TicketTypeNotFoundError()

            self._unit_of_work.lock_inventory(event.id, ticket_type.id)

            if self._registrations.email_registered(event.id, attendee.email):
                raise DuplicateEmailError()

            price = ticket_type.price
            discount = None
            if code is not None:
                result = self.discounts.evaluate(code, ticket_type, now)
                if not result.is_valid:
                    raise InvalidDiscountError(result.message)
                price, discount = result.final_price, result.discount_code

            if self.capacity.has_room(ticket_type, event):
                registration = self._registrations.save(
                    Registration(
                        id=RegistrationId.new(),
                        event_id=event.id,
                        ticket_type_id=ticket_type.id,
                        attendee=attendee,
                        registration_date=now,
                        status=RegistrationStatus.CONFIRMED,
                        total_amount=price,
                        discount_code_used=discount.code if discount else None,
                    )
                )
                if discount is not None:
                    self.discounts.redeem(discount)
                logger.info(
                    "registration_confirmed",
                    registration_id=str(registration.id),
                    event_id=str(event.id),
                    ticket_type_id=str(ticket_type.id),
                    total_amount=str(price),
                )
                return registration

            entry = self.waitlist.enqueue(event.id, ticket_type.id, attendee, discount_code=code)
            registration = self._registrations.save(
                Registration(
                    id=RegistrationId.new(),
                    event_id=event.id,
                    ticket_type_id=ticket_type.id,
                    attendee=attendee,
                    registration_date=now,
                    status=RegistrationStatus.WAITLISTED,
                    total_amount=price,
                    discount_code_used=discount.code if discount else None,
                )
            )
            logger.info(
                "registration_waitlisted",
                registration_id=str(registration.id),
                event_id=str(event.id),
                ticket_type_id=str(ticket_type.id),
                position=entry.position,
            )
            return registration

    def cancel(self, registration_id: str | RegistrationId) -> CancellationResult:
        """Cancel a registration, compute its refund and promote the next in line.

        Raises:
            InvalidIdError: If the registration id is not a valid UUID.
            RegistrationNotFoundError: If the registration does not exist.
            AlreadyCancelledError: If the registration is already cancelled.
        """
        key = parse_id(RegistrationId, registration_id, "registration ID")
        with self._unit_of_work.atomic():
            now = self._clock()
            registration = self._require_registration(key)
            self._unit_of_work.lock_inventory(registration.event_id, registration.ticket_type_id)
            # Re-read under the lock; a concurrent cancel may have won.
            registration = self._require_registration(key)
            event = self._require_event(registration.event_id)

            match registration.status:
                case RegistrationStatus.CANCELLED | RegistrationStatus.REFUNDED:
                    raise AlreadyCancelledError()
                case RegistrationStatus.WAITLISTED:
                    entry = self.waitlist.entry_for(event.id, registration.ticket_type_id, registration.email)
                    if entry is not None:
                        self.waitlist.remove(entry.id)
                case RegistrationStatus.CONFIRMED:
                    pass

            # Evaluated for waitlisted registrations too, even though they have not paid.
            policy = self._events.get_cancellation_policy(event.id)
            refund = self.refunds.evaluate(registration, event, policy, now)

            cancelled = self._registrations.save(registration.transition_to(RegistrationStatus.CANCELLED))
            logger.info(
                "registration_cancelled",
                registration_id=str(cancelled.id),
                event_id=str(event.id),
                previous_status=registration.status.value,
                refund_amount=str(refund.amount),
            )

            promoted = self._promote_next(event.id, registration.ticket_type_id, now)

        return CancellationResult(
            registration_id=cancelled.id,
            status=cancelled.status,
            refund_amount=refund.amount,
            refund_reason=refund.reason,
            promoted=promoted,
        )

    def promote(
        self, event_id: str | EventId, ticket_type_id: str | TicketTypeId
    ) -> Registration | None:
        """Promote the lowest-position waitlist entry if its ticket type has room.

        Fills at most one slot per call; returns None when nothing was promoted.
        """
        event_key = parse_id(EventId, event_id, "event ID")
        ticket_type_key = parse_id(TicketTypeId, ticket_type_id, "ticket type ID")
        with self._unit_of_work.atomic():
            event = self._require_event(event_key)
            ticket_type = self._events.get_ticket_type(ticket_type_key)
            if ticket_type is None or ticket_type.event_id != event.id:
                raise TicketTypeNotFoundError()
            self._unit_of_work.lock_inventory(event.id, ticket_type.id)
            return self._promote_next(event.id, ticket_type.id, self._clock())

    def _promote_next(
        self, event_id: EventId, ticket_type_id: TicketTypeId, now: datetime
    ) -> Registration | None:
        entry = self.waitlist.peek_next(event_id, ticket_type_id)
        if entry is None:
            return None
        ticket_type = self._events.get_ticket_type(ticket_type_id)
        if ticket_type is None:
            return None
        # Only the ticket type's own limit is re-checked here, not the event-wide one.
        if not self.capacity.has_ticket_type_capacity(ticket_type):
            logger.info(
                "waitlist_promotion_skipped",
                event_id=str(event_id),
                ticket_type_id=str(ticket_type_id),
                waitlist_entry_id=str(entry.id),
            )
            return None

        self.waitlist.remove(entry.id)
        shadow = self._registrations.find_waitlisted(event_id, entry.attendee.email)
        if shadow is None:
            logger.warning(
                "waitlist_entry_without_registration",
                event_id=str(event_id),
                waitlist_entry_id=str(entry.id),
            )
            return None

        total_amount, code_used = self._promotion_price(entry, ticket_type, shadow, now)
        promoted = self._registrations.save(
            replace(
                shadow.transition_to(RegistrationStatus.CONFIRMED, at=now),
                total_amount=total_amount,
                discount_code_used=code_used,
            )
        )
        logger.info(
            "waitlist_promoted",
            registration_id=str(promoted.id),
            event_id=str(event_id),
            ticket_type_id=str(ticket_type_id),
            position=entry.position,
        )
        return promoted

    def _promotion_price(
        self,
        entry: WaitlistEntry,
        ticket_type: TicketType,
        shadow: Registration,
        now: datetime,
    ) -> tuple[Money, str | None]:
        if not entry.discount_code:
            return shadow.total_amount, shadow.discount_code_used
        result = self.discounts.evaluate(entry.discount_code, ticket_type, now)
        if result.is_valid and self.discounts.try_redeem(result.discount_code):
            return result.final_price, result.discount_code.code
        logger.info(
            "waitlist_discount_dropped",
            registration_id=str(shadow.id),
            reason=result.message or "redeem refused",
        )
        return ticket_type.price, None

    def remove_from_waitlist(self, entry_id: str | WaitlistEntryId) -> None:
        """Withdraw a waiting attendee: drop the entry and cancel its shadow registration."""
        key = parse_id(WaitlistEntryId, entry_id, "waitlist entry ID")
        with self._unit_of_work.atomic():
            entry = self.waitlist.get(key)
            if entry is None:
                raise WaitlistEntryNotFoundError()
            self._unit_of_work.lock_inventory(entry.event_id, entry.ticket_type_id)
            self.waitlist.remove(entry.id)
            shadow = self._registrations.find_waitlisted(entry.event_id, entry.attendee.email)
            if shadow is not None:
                self._registrations.save(shadow.transition_to(RegistrationStatus.CANCELLED))
            logger.info(
                "waitlist_entry_removed",
                waitlist_entry_id=str(entry.id),
                event_id=str(entry.event_id),
                position=entry.position,
            )

    def get_registration(self, registration_id: str) -> Registration:
        return self._require_registration(parse_id(RegistrationId, registration_id, "registration ID"))

    def list_registrations(self, event_id: str) -> list[Registration]:
        event = self._require_event(parse_id(EventId, event_id, "event ID"))
        return self._registrations.list_for_event(event.id)

    def registrations_by_email(self, email: str) -> list[Registration]:
        return self._registrations.list_by_email(email.strip())

    def waitlist_entries(self, event_id: str, ticket_type_id: str | None = None) -> list[WaitlistEntry]:
        event = self._require_event(parse_id(EventId, event_id, "event ID"))
        ticket_type_key = (
            parse_id(TicketTypeId, ticket_type_id, "ticket type ID") if ticket_type_id else None
        )
        return self.waitlist.entries(event.id, ticket_type_key)

    def capacity_snapshot(self, event_id: str) -> CapacitySnapshot:
        return self.capacity.snapshot(self._require_event(parse_id(EventId, event_id, "event ID")))

    def validate_discount(self, event_id: str, code: str, ticket_type_id: str) -> DiscountResult:
        event = self._require_event(parse_id(EventId, event_id, "event ID"))
        ticket_type_key = parse_id(TicketTypeId, ticket_type_id, "ticket type ID")
        return self.discounts.validate(code.strip(), ticket_type_key, event.id)

    def _require_event(self, event_id: EventId) -> Event:
        event = self._events.get_event(event_id)
        if event is None:
            raise EventNotFoundError()
        return event

    def _require_registration(self, registration_id: RegistrationId) -> Registration:
        registration = self._registrations.get(registration_id)
        if registration is None:
            raise RegistrationNotFoundError()
        return registration

"""Django ORM implementation of the stores.

Rows are converted to frozen domain models at the boundary; no ORM instance
leaves this module.
"""

from contextlib import AbstractContextManager
from decimal import Decimal

from django.db import transaction
from django.db.models import F, Max, Q

from registrations import models
from registrations.domain import (
    Attendee,
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


def _to_event(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        name=row.name,
        description=row.description,
        venue_name=row.venue_name,
        venue_address=row.venue_address,
        start_date=row.start_date,
        end_date=row.end_date,
        overall_capacity=Capacity(row.overall_capacity),
        registration_deadline=row.registration_deadline,
        status=EventStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_ticket_type(row: models.TicketType) -> TicketType:
    return TicketType(
        id=TicketTypeId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        description=row.description,
        price=Money(Decimal(row.price)),
        capacity=Capacity(row.capacity),
        available_from=row.available_from,
        available_until=row.available_until,
        created_at=row.created_at,
    )


def _to_attendee(row: models.Registration | models.WaitlistEntry) -> Attendee:
    return Attendee(
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        phone_number=row.phone_number,
    )


def _to_registration(row: models.Registration) -> Registration:
    return Registration(
        id=RegistrationId(row.id),
        event_id=EventId(row.event_id),
        ticket_type_id=TicketTypeId(row.ticket_type_id),
        attendee=_to_attendee(row),
        registration_date=row.registration_date,
        status=RegistrationStatus(row.status),
        total_amount=Money(Decimal(row.total_amount)),
        discount_code_used=row.discount_code_used,
    )


def _to_waitlist_entry(row: models.WaitlistEntry) -> WaitlistEntry:
    return WaitlistEntry(
        id=WaitlistEntryId(row.id),
        event_id=EventId(row.event_id),
        ticket_type_id=TicketTypeId(row.ticket_type_id),
        attendee=_to_attendee(row),
        position=row.position,
        joined_date=row.joined_date,
        promotion_expiry=row.promotion_expiry,
        discount_code=row.discount_code,
    )


def _to_discount_code(row: models.DiscountCode) -> DiscountCode:
    return DiscountCode(
        id=DiscountCodeId(row.id),
        event_id=EventId(row.event_id),
        code=row.code,
        discount_type=DiscountType(row.discount_type),
        discount_value=Decimal(row.discount_value),
        max_uses=row.max_uses,
        current_uses=row.current_uses,
        valid_from=row.valid_from,
        valid_until=row.valid_until,
        status=DiscountStatus(row.status),
        applicable_ticket_type_ids=tuple(
            TicketTypeId.from_string(value) for value in row.applicable_ticket_type_ids or ()
        ),
    )


def _to_policy(row: models.CancellationPolicy) -> CancellationPolicy:
    return CancellationPolicy(
        id=CancellationPolicyId(row.id),
        event_id=EventId(row.event_id),
        full_refund_deadline_days=row.full_refund_deadline_days,
        partial_refund_deadline_days=row.partial_refund_deadline_days,
        partial_refund_percentage=row.partial_refund_percentage,
        no_refund_after_days=row.no_refund_after_days,
        cancellation_fee=(
            Money(Decimal(row.cancellation_fee)) if row.cancellation_fee is not None else None
        ),
    )


class DjangoEventStore(EventStore):
    """Relational event store using Django ORM."""

    def list_events(self, status: EventStatus | None = None) -> list[Event]:
        queryset = models.Event.objects.all()
        if status is not None:
            queryset = queryset.filter(status=status.value)
        return [_to_event(row) for row in queryset]

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(pk=event_id.value).first()
        return _to_event(row) if row else None

    def save_event(self, event: Event) -> Event:
        row, _ = models.Event.objects.update_or_create(
            pk=event.id.value,
            defaults={
                "name": event.name,
                "description": event.description,
                "venue_name": event.venue_name,
                "venue_address": event.venue_address,
                "start_date": event.start_date,
                "end_date": event.end_date,
                "overall_capacity": event.overall_capacity.value,
                "registration_deadline": event.registration_deadline,
                "status": event.status.value,
            },
        )
        return _to_event(row)

    def delete_event(self, event_id: EventId) -> None:
        models.Event.objects.filter(pk=event_id.value).delete()

    def list_ticket_types(self, event_id: EventId) -> list[TicketType]:
        rows = models.TicketType.objects.filter(event_id=event_id.value)
        return [_to_ticket_type(row) for row in rows]

    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        row = models.TicketType.objects.filter(pk=ticket_type_id.value).first()
        return _to_ticket_type(row) if row else None

    def save_ticket_type(self, ticket_type: TicketType) -> TicketType:
        row, _ = models.TicketType.objects.update_or_create(
            pk=ticket_type.id.value,
            defaults={
                "event_id": ticket_type.event_id.value,
                "name": ticket_type.name,
                "description": ticket_type.description,
                "price": ticket_type.price.amount,
                "capacity": ticket_type.capacity.value,
                "available_from": ticket_type.available_from,
                "available_until": ticket_type.available_until,
            },
        )
        return _to_ticket_type(row)

    def delete_ticket_type(self, ticket_type_id: TicketTypeId) -> None:
        models.TicketType.objects.filter(pk=ticket_type_id.value).delete()

    def get_cancellation_policy(self, event_id: EventId) -> CancellationPolicy | None:
        row = models.CancellationPolicy.objects.filter(event_id=event_id.value).first()
        return _to_policy(row) if row else None

    def save_cancellation_policy(self, policy: CancellationPolicy) -> CancellationPolicy:
        fee = policy.cancellation_fee
        row, _ = models.CancellationPolicy.objects.update_or_create(
            pk=policy.id.value,
            defaults={
                "event_id": policy.event_id.value,
                "full_refund_deadline_days": policy.full_refund_deadline_days,
                "partial_refund_deadline_days": policy.partial_refund_deadline_days,
                "partial_refund_percentage": policy.partial_refund_percentage,
                "no_refund_after_days": policy.no_refund_after_days,
                "cancellation_fee": fee.amount if fee is not None else None,
            },
        )
        return _to_policy(row)


class DjangoRegistrationStore(RegistrationStore):
    """Relational registration store using Django ORM."""

    def get(self, registration_id: RegistrationId) -> Registration | None:
        row = models.Registration.objects.filter(pk=registration_id.value).first()
        return _to_registration(row) if row else None

    def save(self, registration: Registration) -> Registration:
        attendee = registration.attendee
        # save() rather than queryset.update() so post_save cache invalidation fires.
        row, _ = models.Registration.objects.update_or_create(
            pk=registration.id.value,
            defaults={
                "event_id": registration.event_id.value,
                "ticket_type_id": registration.ticket_type_id.value,
                "first_name": attendee.first_name,
                "last_name": attendee.last_name,
                "email": attendee.email,
                "phone_number": attendee.phone_number,
                "registration_date": registration.registration_date,
                "status": registration.status.value,
                "total_amount": registration.total_amount.amount,
                "discount_code_used": registration.discount_code_used,
            },
        )
        return _to_registration(row)

    def list_for_event(self, event_id: EventId) -> list[Registration]:
        rows = models.Registration.objects.filter(event_id=event_id.value)
        return [_to_registration(row) for row in rows]

    def list_by_email(self, email: str) -> list[Registration]:
        rows = models.Registration.objects.filter(email=email)
        return [_to_registration(row) for row in rows]

    def email_registered(self, event_id: EventId, email: str) -> bool:
        return models.Registration.objects.filter(event_id=event_id.value, email=email).exists()

    def find_waitlisted(self, event_id: EventId, email: str) -> Registration | None:
        row = models.Registration.objects.filter(
            event_id=event_id.value,
            email=email,
            status=models.Registration.Status.WAITLISTED,
        ).first()
        return _to_registration(row) if row else None

    def count_confirmed_for_ticket_type(self, ticket_type_id: TicketTypeId) -> int:
        return models.Registration.objects.filter(
            ticket_type_id=ticket_type_id.value,
            status=models.Registration.Status.CONFIRMED,
        ).count()

    def count_confirmed_for_event(self, event_id: EventId) -> int:
        return models.Registration.objects.filter(
            event_id=event_id.value,
            status=models.Registration.Status.CONFIRMED,
        ).count()

    def exists_for_event(self, event_id: EventId) -> bool:
        return models.Registration.objects.filter(event_id=event_id.value).exists()

    def exists_for_ticket_type(self, ticket_type_id: TicketTypeId) -> bool:
        return models.Registration.objects.filter(ticket_type_id=ticket_type_id.value).exists()


class DjangoWaitlistStore(WaitlistStore):
    """Relational waitlist store using Django ORM."""

    def next_position(self, event_id: EventId, ticket_type_id: TicketTypeId) -> int:
        current = models.WaitlistEntry.objects.filter(
            event_id=event_id.value, ticket_type_id=ticket_type_id.value
        ).aggregate(max_position=Max("position"))["max_position"]
        return (current or 0) + 1

    def add(self, entry: WaitlistEntry) -> WaitlistEntry:
        attendee = entry.attendee
        row = models.WaitlistEntry.objects.create(
            id=entry.id.value,
            event_id=entry.event_id.value,
            ticket_type_id=entry.ticket_type_id.value,
            first_name=attendee.first_name,
            last_name=attendee.last_name,
            email=attendee.email,
            phone_number=attendee.phone_number,
            position=entry.position,
            joined_date=entry.joined_date,
            promotion_expiry=entry.promotion_expiry,
            discount_code=entry.discount_code,
        )
        return _to_waitlist_entry(row)

    def peek_next(self, event_id: EventId, ticket_type_id: TicketTypeId) -> WaitlistEntry | None:
        row = (
            models.WaitlistEntry.objects.filter(
                event_id=event_id.value, ticket_type_id=ticket_type_id.value
            )
            .order_by("position")
            .first()
        )
        return _to_waitlist_entry(row) if row else None

    def get(self, entry_id: WaitlistEntryId) -> WaitlistEntry | None:
        row = models.WaitlistEntry.objects.filter(pk=entry_id.value).first()
        return _to_waitlist_entry(row) if row else None

    def remove(self, entry_id: WaitlistEntryId) -> None:
        models.WaitlistEntry.objects.filter(pk=entry_id.value).delete()

    def list_entries(
        self, event_id: EventId, ticket_type_id: TicketTypeId | None = None
    ) -> list[WaitlistEntry]:
        queryset = models.WaitlistEntry.objects.filter(event_id=event_id.value)
        if ticket_type_id is not None:
            queryset = queryset.filter(ticket_type_id=ticket_type_id.value)
        return [_to_waitlist_entry(row) for row in queryset.order_by("position")]

    def find_by_email(
        self, event_id: EventId, ticket_type_id: TicketTypeId, email: str
    ) -> WaitlistEntry | None:
        row = models.WaitlistEntry.objects.filter(
            event_id=event_id.value, ticket_type_id=ticket_type_id.value, email=email
        ).first()
        return _to_waitlist_entry(row) if row else None


class DjangoDiscountCodeStore(DiscountCodeStore):
    """Relational discount code store using Django ORM."""

    def find_by_code(self, event_id: EventId, code: str) -> DiscountCode | None:
        row = models.DiscountCode.objects.filter(
            event_id=event_id.value, code__iexact=code.strip()
        ).first()
        return _to_discount_code(row) if row else None

    def get(self, discount_code_id: DiscountCodeId) -> DiscountCode | None:
        row = models.DiscountCode.objects.filter(pk=discount_code_id.value).first()
        return _to_discount_code(row) if row else None

    def list_for_event(self, event_id: EventId) -> list[DiscountCode]:
        rows = models.DiscountCode.objects.filter(event_id=event_id.value)
        return [_to_discount_code(row) for row in rows]

    def save(self, discount_code: DiscountCode) -> DiscountCode:
        defaults = {
            "event_id": discount_code.event_id.value,
            "code": discount_code.code,
            "discount_type": discount_code.discount_type.value,
            "discount_value": discount_code.discount_value,
            "max_uses": discount_code.max_uses,
            "valid_from": discount_code.valid_from,
            "valid_until": discount_code.valid_until,
            "applicable_ticket_type_ids": [
                str(ticket_type_id) for ticket_type_id in discount_code.applicable_ticket_type_ids
            ],
            "status": discount_code.status.value,
        }
        row, _ = models.DiscountCode.objects.update_or_create(
            pk=discount_code.id.value,
            defaults=defaults,
            create_defaults={**defaults, "current_uses": discount_code.current_uses},
        )
        return _to_discount_code(row)

    def delete(self, discount_code_id: DiscountCodeId) -> None:
        models.DiscountCode.objects.filter(pk=discount_code_id.value).delete()

    def increment_uses(self, discount_code_id: DiscountCodeId) -> bool:
        updated = (
            models.DiscountCode.objects.filter(pk=discount_code_id.value)
            .filter(Q(max_uses__isnull=True) | Q(current_uses__lt=F("max_uses")))
            .update(current_uses=F("current_uses") + 1)
        )
        return updated == 1


class DjangoUnitOfWork(UnitOfWork):
    """Transactions and row locks on the default database."""

    def atomic(self) -> AbstractContextManager[None]:
        return transaction.atomic()

    def lock_inventory(self, event_id: EventId, ticket_type_id: TicketTypeId) -> None:
        # Event row first, then ticket type, so concurrent requests agree on lock order.
        list(models.Event.objects.select_for_update().filter(pk=event_id.value).values_list("pk"))
        list(
            models.TicketType.objects.select_for_update()
            .filter(pk=ticket_type_id.value)
            .values_list("pk")
        )


def django_stores() -> Stores:
    return Stores(
        events=DjangoEventStore(),
        registrations=DjangoRegistrationStore(),
        waitlist=DjangoWaitlistStore(),
        discount_codes=DjangoDiscountCodeStore(),
        unit_of_work=DjangoUnitOfWork(),
    )

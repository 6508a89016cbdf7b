"""Pytest configuration and shared fixtures."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

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
from registrations.domain.inputs import RegistrationRequest
from registrations.services.coordinator import RegistrationCoordinator
from registrations.services.event_service import EventService
from registrations.stores.memory_store import memory_stores

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


class FrozenClock:
    """Callable clock the services read instead of timezone.now."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def stores():
    return memory_stores()


@pytest.fixture
def coordinator(stores, clock) -> RegistrationCoordinator:
    return RegistrationCoordinator(stores, clock=clock)


@pytest.fixture
def event_service(stores, clock) -> EventService:
    return EventService(stores, clock=clock)


@pytest.fixture
def make_event(stores):
    def _make(**overrides) -> Event:
        event = Event(
            id=EventId.new(),
            name="PyCon Workshop Day",
            description="",
            venue_name="Hall A",
            venue_address="1 Main Street",
            start_date=NOW + timedelta(days=30),
            end_date=NOW + timedelta(days=31),
            overall_capacity=Capacity(100),
            registration_deadline=None,
            status=EventStatus.PUBLISHED,
            created_at=NOW,
            updated_at=NOW,
        )
        return stores.events.save_event(replace(event, **overrides))

    return _make


@pytest.fixture
def make_ticket_type(stores):
    def _make(event: Event, **overrides) -> TicketType:
        ticket_type = TicketType(
            id=TicketTypeId.new(),
            event_id=event.id,
            name="General",
            description="",
            price=Money(Decimal("100.00")),
            capacity=Capacity(10),
            available_from=None,
            available_until=None,
            created_at=NOW,
        )
        return stores.events.save_ticket_type(replace(ticket_type, **overrides))

    return _make


@pytest.fixture
def make_discount_code(stores):
    def _make(event: Event, **overrides) -> DiscountCode:
        discount_code = DiscountCode(
            id=DiscountCodeId.new(),
            event_id=event.id,
            code="EARLY25",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal("25"),
            max_uses=None,
            current_uses=0,
            valid_from=NOW - timedelta(days=1),
            valid_until=NOW + timedelta(days=10),
            status=DiscountStatus.ACTIVE,
        )
        return stores.discount_codes.save(replace(discount_code, **overrides))

    return _make


@pytest.fixture
def make_policy(stores):
    def _make(event: Event, **overrides) -> CancellationPolicy:
        policy = CancellationPolicy(
            id=CancellationPolicyId.new(),
            event_id=event.id,
            full_refund_deadline_days=30,
            partial_refund_deadline_days=14,
            partial_refund_percentage=50,
            no_refund_after_days=7,
            cancellation_fee=Money(Decimal("5.00")),
        )
        return stores.events.save_cancellation_policy(replace(policy, **overrides))

    return _make


def registration_request(
    ticket_type: TicketType, email: str = "ada@example.com", **overrides
) -> RegistrationRequest:
    fields = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": email,
        "ticket_type_id": str(ticket_type.id),
    }
    fields.update(overrides)
    return RegistrationRequest(**fields)

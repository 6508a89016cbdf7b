"""Unit tests for EventService.

These test catalog rules and domain error mapping.
Run with: pytest tests/test_services.py -v
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import NOW, registration_request
from registrations.domain import Capacity, EventStatus, Money
from registrations.domain.errors import (
    CancellationPolicyExistsError,
    CancellationPolicyNotFoundError,
    CapacityLimitError,
    DiscountCodeInUseError,
    DuplicateDiscountCodeError,
    EventNotFoundError,
    InvalidIdError,
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


def event_details(**overrides) -> EventDetails:
    fields = {
        "name": "DjangoCon",
        "start_date": NOW + timedelta(days=60),
        "end_date": NOW + timedelta(days=62),
        "overall_capacity": 100,
        "status": "Published",
    }
    fields.update(overrides)
    return EventDetails(**fields)


def ticket_details(**overrides) -> TicketTypeDetails:
    fields = {"name": "General", "price": Decimal("50.00"), "capacity": 40}
    fields.update(overrides)
    return TicketTypeDetails(**fields)


def discount_details(**overrides) -> DiscountCodeDetails:
    fields = {
        "code": "SPRING",
        "discount_type": "Percentage",
        "discount_value": Decimal("10"),
        "valid_from": NOW,
        "valid_until": NOW + timedelta(days=30),
    }
    fields.update(overrides)
    return DiscountCodeDetails(**fields)


POLICY = CancellationPolicyTerms(
    full_refund_deadline_days=30,
    partial_refund_deadline_days=14,
    partial_refund_percentage=50,
    no_refund_after_days=7,
    cancellation_fee=Decimal("5.00"),
)


class TestEvents:
    def test_get_event_invalid_id_raises_error(self, event_service):
        """get_event raises InvalidIdError for malformed UUID."""
        with pytest.raises(InvalidIdError):
            event_service.get_event("not-a-uuid")

    def test_get_event_not_found_raises_error(self, event_service):
        """get_event raises EventNotFoundError when store returns None."""
        with pytest.raises(EventNotFoundError):
            event_service.get_event("5a0f6a53-3b53-4ef6-a2a6-4c1bd0b1f0f2")

    def test_create_event(self, event_service):
        event = event_service.create_event(event_details())

        assert event.status is EventStatus.PUBLISHED
        assert event.overall_capacity == Capacity(100)
        assert event.created_at == NOW
        assert event_service.get_event(str(event.id)) == event

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"end_date": NOW + timedelta(days=59)}, "End date must be after start date"),
            (
                {"registration_deadline": NOW + timedelta(days=61)},
                "Registration deadline must be before event start date",
            ),
            ({"overall_capacity": 0}, "Overall capacity must be positive"),
            ({"status": "Postponed"}, "Unknown event status: Postponed"),
        ],
    )
    def test_create_event_rules(self, event_service, overrides, message):
        with pytest.raises(InvalidInputError, match=message):
            event_service.create_event(event_details(**overrides))

    def test_list_events_filters_by_status(self, event_service):
        event_service.create_event(event_details(name="Live"))
        event_service.create_event(event_details(name="Draft", status="Draft"))

        assert [e.name for e in event_service.list_events("Draft")] == ["Draft"]
        assert len(event_service.list_events()) == 2

    def test_dates_are_locked_once_someone_registered(self, event_service, coordinator):
        event = event_service.create_event(event_details())
        ticket_type = event_service.create_ticket_type(str(event.id), ticket_details())
        coordinator.register(str(event.id), registration_request(ticket_type))

        with pytest.raises(RegistrationsExistError):
            event_service.update_event(str(event.id), event_details(start_date=NOW + timedelta(days=61)))
        renamed = event_service.update_event(str(event.id), event_details(name="DjangoCon EU"))
        assert renamed.name == "DjangoCon EU"

    def test_capacity_cannot_drop_below_allocated_tickets(self, event_service):
        event = event_service.create_event(event_details())
        event_service.create_ticket_type(str(event.id), ticket_details(capacity=60))

        with pytest.raises(CapacityLimitError):
            event_service.update_event(str(event.id), event_details(overall_capacity=50))

    def test_delete_blocked_by_registrations(self, event_service, coordinator):
        event = event_service.create_event(event_details())
        ticket_type = event_service.create_ticket_type(str(event.id), ticket_details())
        registration = coordinator.register(str(event.id), registration_request(ticket_type))
        coordinator.cancel(str(registration.id))

        with pytest.raises(RegistrationsExistError):
            event_service.delete_event(str(event.id))

    def test_delete_event(self, event_service):
        event = event_service.create_event(event_details())
        event_service.delete_event(str(event.id))
        with pytest.raises(EventNotFoundError):
            event_service.get_event(str(event.id))


class TestTicketTypes:
    @pytest.fixture
    def event(self, event_service):
        return event_service.create_event(event_details())

    def test_sum_of_capacities_cannot_exceed_event(self, event_service, event):
        event_service.create_ticket_type(str(event.id), ticket_details(capacity=60))
        with pytest.raises(CapacityLimitError, match="Sum of ticket type capacities"):
            event_service.create_ticket_type(str(event.id), ticket_details(name="VIP", capacity=50))

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"price": Decimal("-1")}, "Price cannot be negative"),
            ({"capacity": 0}, "Capacity must be positive"),
            (
                {"available_until": NOW + timedelta(days=61)},
                "Available until date must be before or at event start",
            ),
        ],
    )
    def test_create_rules(self, event_service, event, overrides, message):
        with pytest.raises(InvalidInputError, match=message):
            event_service.create_ticket_type(str(event.id), ticket_details(**overrides))

    def test_update_may_reuse_its_own_allocation(self, event_service, event):
        ticket_type = event_service.create_ticket_type(str(event.id), ticket_details(capacity=100))
        updated = event_service.update_ticket_type(
            str(event.id), str(ticket_type.id), ticket_details(capacity=100, price=Decimal("60"))
        )
        assert updated.price == Money(Decimal("60"))

    def test_cannot_shrink_below_confirmed(self, event_service, coordinator, event):
        ticket_type = event_service.create_ticket_type(str(event.id), ticket_details(capacity=3))
        for i in range(2):
            coordinator.register(str(event.id), registration_request(ticket_type, f"g{i}@example.com"))

        with pytest.raises(CapacityLimitError, match="below current registration count"):
            event_service.update_ticket_type(str(event.id), str(ticket_type.id), ticket_details(capacity=1))

    def test_ticket_type_of_another_event(self, event_service, event):
        other = event_service.create_event(event_details(name="Other"))
        ticket_type = event_service.create_ticket_type(str(other.id), ticket_details())
        with pytest.raises(TicketTypeNotFoundError):
            event_service.get_ticket_type(str(event.id), str(ticket_type.id))

    def test_delete_blocked_by_registrations(self, event_service, coordinator, event):
        ticket_type = event_service.create_ticket_type(str(event.id), ticket_details())
        coordinator.register(str(event.id), registration_request(ticket_type))
        with pytest.raises(RegistrationsExistError):
            event_service.delete_ticket_type(str(event.id), str(ticket_type.id))


class TestDiscountCodes:
    @pytest.fixture
    def event(self, event_service):
        return event_service.create_event(event_details())

    def test_duplicate_code_ignores_case(self, event_service, event):
        event_service.create_discount_code(str(event.id), discount_details())
        with pytest.raises(DuplicateDiscountCodeError):
            event_service.create_discount_code(str(event.id), discount_details(code="spring"))

    def test_same_code_on_another_event_is_fine(self, event_service, event):
        other = event_service.create_event(event_details(name="Other"))
        event_service.create_discount_code(str(event.id), discount_details())
        assert event_service.create_discount_code(str(other.id), discount_details()).code == "SPRING"

    @pytest.mark.parametrize("value", ["-1", "100.01"])
    def test_percentage_range(self, event_service, event, value):
        with pytest.raises(InvalidInputError, match="between 0 and 100"):
            event_service.create_discount_code(str(event.id), discount_details(discount_value=Decimal(value)))

    def test_applicable_ticket_types_must_belong_to_event(self, event_service, event):
        other = event_service.create_event(event_details(name="Other"))
        foreign = event_service.create_ticket_type(str(other.id), ticket_details())
        with pytest.raises(TicketTypeNotFoundError):
            event_service.create_discount_code(
                str(event.id), discount_details(applicable_ticket_type_ids=(str(foreign.id),))
            )

    def test_update_keeps_usage_count(self, event_service, stores, event):
        discount_code = event_service.create_discount_code(str(event.id), discount_details())
        stores.discount_codes.increment_uses(discount_code.id)

        updated = event_service.update_discount_code(
            str(event.id), str(discount_code.id), discount_details(discount_value=Decimal("20"))
        )

        assert updated.discount_value == Decimal("20")
        assert updated.current_uses == 1

    def test_used_code_cannot_be_deleted(self, event_service, stores, event):
        discount_code = event_service.create_discount_code(str(event.id), discount_details())
        stores.discount_codes.increment_uses(discount_code.id)
        with pytest.raises(DiscountCodeInUseError):
            event_service.delete_discount_code(str(event.id), str(discount_code.id))


class TestCancellationPolicy:
    @pytest.fixture
    def event(self, event_service):
        return event_service.create_event(event_details())

    def test_one_policy_per_event(self, event_service, event):
        event_service.create_cancellation_policy(str(event.id), POLICY)
        with pytest.raises(CancellationPolicyExistsError):
            event_service.create_cancellation_policy(str(event.id), POLICY)

    def test_update_requires_existing_policy(self, event_service, event):
        with pytest.raises(CancellationPolicyNotFoundError):
            event_service.update_cancellation_policy(str(event.id), POLICY)

    def test_update_replaces_terms(self, event_service, event):
        created = event_service.create_cancellation_policy(str(event.id), POLICY)
        updated = event_service.update_cancellation_policy(
            str(event.id),
            CancellationPolicyTerms(
                full_refund_deadline_days=21,
                partial_refund_deadline_days=7,
                partial_refund_percentage=25,
                no_refund_after_days=2,
            ),
        )
        assert updated.id == created.id
        assert updated.cancellation_fee is None
        assert event_service.get_cancellation_policy(str(event.id)).partial_refund_percentage == 25

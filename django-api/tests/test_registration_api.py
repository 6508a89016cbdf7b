"""Integration tests for registration, cancellation and waitlist endpoints.

Run with: pytest tests/test_registration_api.py -v
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from freezegun import freeze_time
from rest_framework.test import APIClient

from registrations import models


@pytest.fixture
def event_row(db) -> models.Event:
    now = timezone.now()
    return models.Event.objects.create(
        name="Django Under the Hood",
        start_date=now + timedelta(days=45),
        end_date=now + timedelta(days=46),
        overall_capacity=10,
        status=models.Event.Status.PUBLISHED,
    )


@pytest.fixture
def ticket_row(event_row) -> models.TicketType:
    return models.TicketType.objects.create(
        event=event_row, name="General", price=Decimal("100.00"), capacity=1
    )


@pytest.fixture
def register(api_client: APIClient, event_row, ticket_row):
    def _register(email: str, **extra):
        payload = {
            "first_name": "Jane",
            "last_name": "Doe",
            "email": email,
            "ticket_type_id": str(ticket_row.id),
            **extra,
        }
        return api_client.post(f"/api/events/{event_row.id}/registrations", payload, format="json")

    return _register


@pytest.mark.django_db
class TestRegister:
    """Tests for POST /api/events/{id}/registrations"""

    def test_confirmed_registration_returns_201(self, register):
        response = register("jane@example.com")

        assert response.status_code == 201
        assert response.json()["status"] == "Confirmed"
        assert response.json()["total_amount"] == "100.00"

    def test_waitlisted_registration_returns_200(self, register, api_client, event_row):
        register("first@example.com")

        response = register("second@example.com")

        assert response.status_code == 200
        assert response.json()["status"] == "Waitlisted"
        [entry] = api_client.get(f"/api/events/{event_row.id}/waitlist").json()
        assert entry["position"] == 1
        assert entry["email"] == "second@example.com"

    def test_duplicate_email(self, register):
        register("jane@example.com")
        response = register("jane@example.com")
        assert response.status_code == 400
        assert response.json() == {
            "code": "DUPLICATE_EMAIL",
            "message": "Email already registered for this event",
        }

    def test_invalid_email(self, register):
        response = register("jane")
        assert response.status_code == 400
        assert response.json() == {"code": "INVALID_INPUT", "message": "Valid email is required"}

    def test_unpublished_event(self, register, event_row):
        event_row.status = models.Event.Status.DRAFT
        event_row.save()
        response = register("jane@example.com")
        assert response.json()["code"] == "EVENT_NOT_PUBLISHED"

    def test_unknown_ticket_type(self, api_client, event_row):
        response = api_client.post(
            f"/api/events/{event_row.id}/registrations",
            {
                "first_name": "Jane",
                "last_name": "Doe",
                "email": "jane@example.com",
                "ticket_type_id": "a8d7b3c2-5f0e-4c1a-9b2d-7e6f5a4b3c2d",
            },
            format="json",
        )
        assert response.status_code == 404
        assert response.json()["code"] == "TICKET_TYPE_NOT_FOUND"

    def test_deadline_recently_passed(self, register, event_row):
        with freeze_time(timezone.now()) as frozen:
            event_row.registration_deadline = timezone.now() + timedelta(hours=1)
            event_row.save()
            frozen.tick(timedelta(hours=2))

            response = register("late@example.com")

        assert response.status_code == 400
        assert response.json()["code"] == "DEADLINE_PASSED"

    def test_discount_code_applied(self, register, event_row):
        now = timezone.now()
        models.DiscountCode.objects.create(
            event=event_row,
            code="HALF",
            discount_type=models.DiscountCode.DiscountType.PERCENTAGE,
            discount_value=Decimal("50"),
            valid_from=now - timedelta(days=1),
            valid_until=now + timedelta(days=1),
        )

        response = register("jane@example.com", discount_code="half")

        assert response.json()["total_amount"] == "50.00"
        assert response.json()["discount_code_used"] == "HALF"


@pytest.mark.django_db(transaction=True)
class TestCancel:
    """Tests for POST /api/registrations/{id}/cancel and DELETE /api/registrations/{id}"""

    def test_cancel_with_refund_promotes_waitlist(self, register, api_client, event_row):
        confirmed = register("first@example.com").json()
        waiting = register("second@example.com").json()

        response = api_client.post(f"/api/registrations/{confirmed['id']}/cancel")

        assert response.status_code == 200
        assert response.json() == {
            "registration_id": confirmed["id"],
            "status": "Cancelled",
            "refund_amount": "100.00",
            "refund_reason": "full refund - default policy",
            "promoted_registration_id": waiting["id"],
        }
        assert api_client.get(f"/api/registrations/{waiting['id']}").json()["status"] == "Confirmed"
        assert api_client.get(f"/api/events/{event_row.id}/waitlist").json() == []

    def test_cancel_twice(self, register, api_client):
        registration = register("jane@example.com").json()

        assert api_client.delete(f"/api/registrations/{registration['id']}").status_code == 204
        response = api_client.delete(f"/api/registrations/{registration['id']}")

        assert response.status_code == 400
        assert response.json()["code"] == "ALREADY_CANCELLED"

    def test_cancel_frees_capacity(self, register, api_client, event_row):
        registration = register("jane@example.com").json()
        capacity_url = f"/api/events/{event_row.id}/capacity"
        assert api_client.get(capacity_url).json()["ticket_types"][0]["available"] == 0

        api_client.post(f"/api/registrations/{registration['id']}/cancel")

        body = api_client.get(capacity_url).json()
        assert body["confirmed"] == 0
        assert body["ticket_types"][0]["available"] == 1

    def test_cancel_unknown_registration(self, api_client, db):
        response = api_client.post("/api/registrations/2f0c9b5e-8a67-4c3b-a1c9-0d1f3e5a7b9c/cancel")
        assert response.status_code == 404


@pytest.mark.django_db
class TestLookups:
    def test_registrations_for_event(self, register, api_client, event_row):
        register("a@example.com")
        register("b@example.com")

        body = api_client.get(f"/api/events/{event_row.id}/registrations").json()

        assert [(r["email"], r["status"]) for r in body] == [
            ("a@example.com", "Confirmed"),
            ("b@example.com", "Waitlisted"),
        ]

    def test_registrations_by_email(self, register, api_client):
        register("jane@example.com")
        body = api_client.get("/api/registrations/by-email/jane@example.com").json()
        assert len(body) == 1

    def test_remove_from_waitlist(self, register, api_client, event_row, ticket_row):
        register("first@example.com")
        waiting = register("second@example.com").json()
        [entry] = api_client.get(f"/api/events/{event_row.id}/waitlist/{ticket_row.id}").json()

        response = api_client.delete(f"/api/waitlist/{entry['id']}")

        assert response.status_code == 204
        assert api_client.get(f"/api/registrations/{waiting['id']}").json()["status"] == "Cancelled"

"""Integration tests for the event catalog endpoints.

Run with: pytest tests/test_event_catalog.py -v
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from registrations import models
from registrations.cache import event_detail_key, event_list_key


@pytest.fixture
def event_payload() -> dict:
    now = timezone.now()
    return {
        "name": "PyData Berlin",
        "venue_name": "bcc",
        "start_date": (now + timedelta(days=40)).isoformat(),
        "end_date": (now + timedelta(days=42)).isoformat(),
        "overall_capacity": 300,
        "status": "Published",
    }


@pytest.fixture
def event_row(db) -> models.Event:
    now = timezone.now()
    return models.Event.objects.create(
        name="PyCon US",
        start_date=now + timedelta(days=30),
        end_date=now + timedelta(days=33),
        overall_capacity=500,
        status=models.Event.Status.PUBLISHED,
    )


@pytest.mark.django_db
class TestEventList:
    """Tests for GET/POST /api/events"""

    def test_list_events(self, api_client: APIClient, event_row):
        """Given events exist, returns them."""
        response = api_client.get("/api/events")

        assert response.status_code == 200
        assert [e["name"] for e in response.json()] == ["PyCon US"]
        assert response.json()[0]["id"] == str(event_row.id)

    def test_list_events_empty_catalog(self, api_client: APIClient):
        """Given no events, returns empty list."""
        response = api_client.get("/api/events")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_events_by_status(self, api_client: APIClient, event_row):
        assert api_client.get("/api/events", {"status": "Draft"}).json() == []
        assert len(api_client.get("/api/events", {"status": "Published"}).json()) == 1

    def test_unknown_status_filter(self, api_client: APIClient):
        response = api_client.get("/api/events", {"status": "Sold out"})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    def test_list_events_cached_response(self, api_client: APIClient):
        """Given cached data, returns from cache."""
        cache.set(event_list_key(), [{"name": "From cache"}])
        response = api_client.get("/api/events")
        assert response.json() == [{"name": "From cache"}]

    def test_create_event(self, api_client: APIClient, event_payload):
        response = api_client.post("/api/events", event_payload, format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "Published"
        assert body["overall_capacity"] == 300
        assert models.Event.objects.filter(pk=body["id"]).exists()

    def test_create_event_with_end_before_start(self, api_client: APIClient, event_payload):
        event_payload["end_date"] = event_payload["start_date"]
        response = api_client.post("/api/events", event_payload, format="json")
        assert response.status_code == 400
        assert response.json() == {"code": "INVALID_INPUT", "message": "End date must be after start date"}

    def test_create_event_missing_fields(self, api_client: APIClient):
        response = api_client.post("/api/events", {"name": "Half"}, format="json")
        assert response.status_code == 400
        assert "start_date" in response.json()


@pytest.mark.django_db
class TestEventDetail:
    """Tests for GET/PUT/DELETE /api/events/{id}"""

    def test_get_event_returns_details(self, api_client: APIClient, event_row):
        """Given event exists, returns event details."""
        models.TicketType.objects.create(
            event=event_row, name="General", price=Decimal("25.00"), capacity=100
        )

        response = api_client.get(f"/api/events/{event_row.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "PyCon US"
        assert [t["name"] for t in body["ticket_types"]] == ["General"]
        assert body["ticket_types"][0]["price"] == "25.00"

    @pytest.mark.django_db(transaction=True)
    def test_get_event_is_cached(self, api_client: APIClient, event_row):
        api_client.get(f"/api/events/{event_row.id}")
        assert cache.get(event_detail_key(event_row.id))["name"] == "PyCon US"

    def test_get_event_not_found(self, api_client: APIClient):
        """Given event does not exist, returns 404."""
        response = api_client.get("/api/events/8c1f0f9e-1d1b-4a4e-9b7e-2f5b3f0f6b1d")
        assert response.status_code == 404
        assert response.json() == {"code": "EVENT_NOT_FOUND", "message": "Event not found"}

    def test_get_event_invalid_id_format(self, api_client: APIClient):
        """Given invalid UUID, returns 400."""
        response = api_client.get("/api/events/123")
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ID"

    def test_update_event(self, api_client: APIClient, event_row, event_payload):
        response = api_client.put(f"/api/events/{event_row.id}", event_payload, format="json")
        assert response.status_code == 200
        event_row.refresh_from_db()
        assert event_row.name == "PyData Berlin"

    def test_delete_event(self, api_client: APIClient, event_row):
        response = api_client.delete(f"/api/events/{event_row.id}")
        assert response.status_code == 204
        assert not models.Event.objects.exists()


@pytest.mark.django_db
class TestTicketTypes:
    """Tests for /api/events/{id}/ticket-types"""

    def test_create_and_list(self, api_client: APIClient, event_row):
        url = f"/api/events/{event_row.id}/ticket-types"
        created = api_client.post(url, {"name": "Student", "price": "10.00", "capacity": 50}, format="json")

        assert created.status_code == 201
        assert [t["name"] for t in api_client.get(url).json()] == ["Student"]

    def test_capacity_over_event_limit(self, api_client: APIClient, event_row):
        url = f"/api/events/{event_row.id}/ticket-types"
        api_client.post(url, {"name": "General", "price": "10.00", "capacity": 300}, format="json")

        response = api_client.post(url, {"name": "VIP", "price": "99.00", "capacity": 250}, format="json")

        assert response.status_code == 400
        assert response.json()["code"] == "CAPACITY_LIMIT"

    def test_ticket_type_of_unknown_event(self, api_client: APIClient, db):
        response = api_client.get("/api/events/8c1f0f9e-1d1b-4a4e-9b7e-2f5b3f0f6b1d/ticket-types")
        assert response.status_code == 404


@pytest.mark.django_db
class TestDiscountCodes:
    """Tests for /api/events/{id}/discount-codes"""

    @pytest.fixture
    def payload(self) -> dict:
        now = timezone.now()
        return {
            "code": "EARLYBIRD",
            "discount_type": "Percentage",
            "discount_value": "20",
            "valid_from": (now - timedelta(days=1)).isoformat(),
            "valid_until": (now + timedelta(days=7)).isoformat(),
            "max_uses": 1,
        }

    def test_create_duplicate_code(self, api_client: APIClient, event_row, payload):
        url = f"/api/events/{event_row.id}/discount-codes"
        assert api_client.post(url, payload, format="json").status_code == 201

        payload["code"] = "earlybird"
        response = api_client.post(url, payload, format="json")

        assert response.status_code == 400
        assert response.json()["code"] == "DUPLICATE_DISCOUNT_CODE"

    def test_validate_code(self, api_client: APIClient, event_row, payload):
        ticket_type = models.TicketType.objects.create(
            event=event_row, name="General", price=Decimal("100.00"), capacity=10
        )
        api_client.post(f"/api/events/{event_row.id}/discount-codes", payload, format="json")

        response = api_client.post(
            f"/api/events/{event_row.id}/discount-codes/earlybird/validate",
            {"ticket_type_id": str(ticket_type.id)},
            format="json",
        )

        assert response.status_code == 200
        assert response.json() == {
            "is_valid": True,
            "message": None,
            "original_price": "100.00",
            "discount_amount": "20.00",
            "final_price": "80.00",
        }

    def test_validate_unknown_code_is_not_an_error(self, api_client: APIClient, event_row):
        ticket_type = models.TicketType.objects.create(
            event=event_row, name="General", price=Decimal("100.00"), capacity=10
        )
        response = api_client.post(
            f"/api/events/{event_row.id}/discount-codes/NOPE/validate",
            {"ticket_type_id": str(ticket_type.id)},
            format="json",
        )
        assert response.status_code == 200
        assert response.json()["is_valid"] is False
        assert response.json()["message"] == "Invalid discount code"


@pytest.mark.django_db
class TestCancellationPolicy:
    """Tests for /api/events/{id}/cancellation-policy"""

    def test_create_get_update(self, api_client: APIClient, event_row):
        url = f"/api/events/{event_row.id}/cancellation-policy"
        terms = {
            "full_refund_deadline_days": 30,
            "partial_refund_deadline_days": 14,
            "partial_refund_percentage": 50,
            "no_refund_after_days": 7,
            "cancellation_fee": "5.00",
        }

        assert api_client.get(url).status_code == 404
        assert api_client.post(url, terms, format="json").status_code == 201
        assert api_client.post(url, terms, format="json").json()["code"] == "CANCELLATION_POLICY_EXISTS"

        terms["partial_refund_percentage"] = 40
        assert api_client.put(url, terms, format="json").status_code == 200
        assert api_client.get(url).json()["partial_refund_percentage"] == 40

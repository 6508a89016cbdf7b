"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import structlog
from django.core.cache import cache
from django.db import transaction
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from registrations import cache as cache_keys
from registrations.domain import EventId, RegistrationStatus
from registrations.domain.errors import DomainError, ErrorKind
from registrations.domain.inputs import (
    CancellationPolicyTerms,
    DiscountCodeDetails,
    EventDetails,
    RegistrationRequest,
    TicketTypeDetails,
)
from registrations.handlers.serializers import (
    CancellationPolicyInputSerializer,
    CancellationPolicySerializer,
    CancellationResultSerializer,
    CapacitySnapshotSerializer,
    DiscountCodeInputSerializer,
    DiscountCodeSerializer,
    DiscountValidationInputSerializer,
    DiscountValidationSerializer,
    EventInputSerializer,
    EventSerializer,
    RegistrationInputSerializer,
    RegistrationSerializer,
    TicketTypeInputSerializer,
    TicketTypeSerializer,
    WaitlistEntrySerializer,
)
from registrations.services.coordinator import RegistrationCoordinator
from registrations.services.event_service import EventService
from registrations.services.identifiers import parse_id
from registrations.stores.django_store import django_stores

logger = structlog.get_logger(__name__)


def event_service() -> EventService:
    return EventService(django_stores())


def coordinator() -> RegistrationCoordinator:
    return RegistrationCoordinator(django_stores())


class DomainErrorMixin:
    """Translate domain errors into {"code", "message"} responses.

    Not-found errors become 404; every other domain error is a 400.
    """

    def handle_exception(self, exc: Exception) -> Response:
        if isinstance(exc, DomainError):
            status_code = (
                status.HTTP_404_NOT_FOUND if exc.kind is ErrorKind.NOT_FOUND else status.HTTP_400_BAD_REQUEST
            )
            logger.info("domain_error", code=exc.code.value, path=self.request.path, status=status_code)
            return Response({"code": exc.code.value, "message": exc.message}, status=status_code)
        return super().handle_exception(exc)


def _parsed(serializer_class, request: Request) -> dict:
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _cached(key: str, build) -> object:
    data = cache.get(key)
    if data is None:
        data = build()
        # Only committed state is cached; an open transaction may still roll back.
        if not transaction.get_connection().in_atomic_block:
            cache.set(key, data, cache_keys.timeout())
    return data


# Events


class EventListView(DomainErrorMixin, APIView):
    """Handler for GET/POST /api/events"""

    def get(self, request: Request) -> Response:
        event_status = request.query_params.get("status") or None

        def build() -> list:
            return EventSerializer(event_service().list_events(event_status), many=True).data

        return Response(_cached(cache_keys.event_list_key(event_status), build))

    def post(self, request: Request) -> Response:
        event = event_service().create_event(EventDetails(**_parsed(EventInputSerializer, request)))
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(DomainErrorMixin, APIView):
    """Handler for GET/PUT/DELETE /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        key = parse_id(EventId, event_id, "event ID")

        def build() -> dict:
            service = event_service()
            data = dict(EventSerializer(service.get_event(key)).data)
            data["ticket_types"] = TicketTypeSerializer(service.list_ticket_types(key), many=True).data
            return data

        return Response(_cached(cache_keys.event_detail_key(key), build))

    def put(self, request: Request, event_id: str) -> Response:
        event = event_service().update_event(event_id, EventDetails(**_parsed(EventInputSerializer, request)))
        return Response(EventSerializer(event).data)

    def delete(self, request: Request, event_id: str) -> Response:
        event_service().delete_event(event_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CapacityView(DomainErrorMixin, APIView):
    """Handler for GET /api/events/{event_id}/capacity"""

    def get(self, request: Request, event_id: str) -> Response:
        key = parse_id(EventId, event_id, "event ID")

        def build() -> dict:
            return CapacitySnapshotSerializer(coordinator().capacity_snapshot(key)).data

        return Response(_cached(cache_keys.capacity_key(key), build))


# Ticket types


class TicketTypeListView(DomainErrorMixin, APIView):
    """Handler for GET/POST /api/events/{event_id}/ticket-types"""

    def get(self, request: Request, event_id: str) -> Response:
        key = parse_id(EventId, event_id, "event ID")

        def build() -> list:
            return TicketTypeSerializer(event_service().list_ticket_types(key), many=True).data

        return Response(_cached(cache_keys.ticket_types_key(key), build))

    def post(self, request: Request, event_id: str) -> Response:
        details = TicketTypeDetails(**_parsed(TicketTypeInputSerializer, request))
        ticket_type = event_service().create_ticket_type(event_id, details)
        return Response(TicketTypeSerializer(ticket_type).data, status=status.HTTP_201_CREATED)


class TicketTypeDetailView(DomainErrorMixin, APIView):
    """Handler for GET/PUT/DELETE /api/events/{event_id}/ticket-types/{ticket_type_id}"""

    def get(self, request: Request, event_id: str, ticket_type_id: str) -> Response:
        ticket_type = event_service().get_ticket_type(event_id, ticket_type_id)
        return Response(TicketTypeSerializer(ticket_type).data)

    def put(self, request: Request, event_id: str, ticket_type_id: str) -> Response:
        details = TicketTypeDetails(**_parsed(TicketTypeInputSerializer, request))
        ticket_type = event_service().update_ticket_type(event_id, ticket_type_id, details)
        return Response(TicketTypeSerializer(ticket_type).data)

    def delete(self, request: Request, event_id: str, ticket_type_id: str) -> Response:
        event_service().delete_ticket_type(event_id, ticket_type_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Discount codes


class DiscountCodeListView(DomainErrorMixin, APIView):
    """Handler for GET/POST /api/events/{event_id}/discount-codes"""

    def get(self, request: Request, event_id: str) -> Response:
        return Response(DiscountCodeSerializer(event_service().list_discount_codes(event_id), many=True).data)

    def post(self, request: Request, event_id: str) -> Response:
        details = DiscountCodeDetails(**_parsed(DiscountCodeInputSerializer, request))
        discount_code = event_service().create_discount_code(event_id, details)
        return Response(DiscountCodeSerializer(discount_code).data, status=status.HTTP_201_CREATED)


class DiscountCodeDetailView(DomainErrorMixin, APIView):
    """Handler for GET/PUT/DELETE /api/events/{event_id}/discount-codes/{discount_code_id}"""

    def get(self, request: Request, event_id: str, discount_code_id: str) -> Response:
        discount_code = event_service().get_discount_code(event_id, discount_code_id)
        return Response(DiscountCodeSerializer(discount_code).data)

    def put(self, request: Request, event_id: str, discount_code_id: str) -> Response:
        details = DiscountCodeDetails(**_parsed(DiscountCodeInputSerializer, request))
        discount_code = event_service().update_discount_code(event_id, discount_code_id, details)
        return Response(DiscountCodeSerializer(discount_code).data)

    def delete(self, request: Request, event_id: str, discount_code_id: str) -> Response:
        event_service().delete_discount_code(event_id, discount_code_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class DiscountCodeValidateView(DomainErrorMixin, APIView):
    """Handler for POST /api/events/{event_id}/discount-codes/{code}/validate

    A rejected code is a normal 200 answer with is_valid false.
    """

    def post(self, request: Request, event_id: str, code: str) -> Response:
        data = _parsed(DiscountValidationInputSerializer, request)
        result = coordinator().validate_discount(event_id, code, data["ticket_type_id"])
        return Response(DiscountValidationSerializer(result).data)


# Cancellation policy


class CancellationPolicyView(DomainErrorMixin, APIView):
    """Handler for GET/POST/PUT /api/events/{event_id}/cancellation-policy"""

    def get(self, request: Request, event_id: str) -> Response:
        return Response(CancellationPolicySerializer(event_service().get_cancellation_policy(event_id)).data)

    def post(self, request: Request, event_id: str) -> Response:
        terms = CancellationPolicyTerms(**_parsed(CancellationPolicyInputSerializer, request))
        policy = event_service().create_cancellation_policy(event_id, terms)
        return Response(CancellationPolicySerializer(policy).data, status=status.HTTP_201_CREATED)

    def put(self, request: Request, event_id: str) -> Response:
        terms = CancellationPolicyTerms(**_parsed(CancellationPolicyInputSerializer, request))
        policy = event_service().update_cancellation_policy(event_id, terms)
        return Response(CancellationPolicySerializer(policy).data)


# Registrations


class EventRegistrationsView(DomainErrorMixin, APIView):
    """Handler for GET/POST /api/events/{event_id}/registrations

    POST answers 201 when the attendee is confirmed and 200 when waitlisted.
    """

    def get(self, request: Request, event_id: str) -> Response:
        return Response(RegistrationSerializer(coordinator().list_registrations(event_id), many=True).data)

    def post(self, request: Request, event_id: str) -> Response:
        registration = coordinator().register(
            event_id, RegistrationRequest(**_parsed(RegistrationInputSerializer, request))
        )
        status_code = (
            status.HTTP_201_CREATED
            if registration.status is RegistrationStatus.CONFIRMED
            else status.HTTP_200_OK
        )
        return Response(RegistrationSerializer(registration).data, status=status_code)


class RegistrationDetailView(DomainErrorMixin, APIView):
    """Handler for GET/DELETE /api/registrations/{registration_id}"""

    def get(self, request: Request, registration_id: str) -> Response:
        return Response(RegistrationSerializer(coordinator().get_registration(registration_id)).data)

    def delete(self, request: Request, registration_id: str) -> Response:
        coordinator().cancel(registration_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class RegistrationCancelView(DomainErrorMixin, APIView):
    """Handler for POST /api/registrations/{registration_id}/cancel"""

    def post(self, request: Request, registration_id: str) -> Response:
        result = coordinator().cancel(registration_id)
        return Response(CancellationResultSerializer(result).data)


class RegistrationsByEmailView(DomainErrorMixin, APIView):
    """Handler for GET /api/registrations/by-email/{email}"""

    def get(self, request: Request, email: str) -> Response:
        return Response(RegistrationSerializer(coordinator().registrations_by_email(email), many=True).data)


# Waitlist


class WaitlistView(DomainErrorMixin, APIView):
    """Handler for GET /api/events/{event_id}/waitlist[/{ticket_type_id}]"""

    def get(self, request: Request, event_id: str, ticket_type_id: str | None = None) -> Response:
        entries = coordinator().waitlist_entries(event_id, ticket_type_id)
        return Response(WaitlistEntrySerializer(entries, many=True).data)


class WaitlistEntryView(DomainErrorMixin, APIView):
    """Handler for DELETE /api/waitlist/{entry_id}"""

    def delete(self, request: Request, entry_id: str) -> Response:
        coordinator().remove_from_waitlist(entry_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

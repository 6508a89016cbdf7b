from django.urls import path

from registrations.handlers import (
    CancellationPolicyView,
    CapacityView,
    DiscountCodeDetailView,
    DiscountCodeListView,
    DiscountCodeValidateView,
    EventDetailView,
    EventListView,
    EventRegistrationsView,
    RegistrationCancelView,
    RegistrationDetailView,
    RegistrationsByEmailView,
    TicketTypeDetailView,
    TicketTypeListView,
    WaitlistEntryView,
    WaitlistView,
)

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("events/<str:event_id>/capacity", CapacityView.as_view(), name="event-capacity"),
    path(
        "events/<str:event_id>/ticket-types",
        TicketTypeListView.as_view(),
        name="ticket-type-list",
    ),
    path(
        "events/<str:event_id>/ticket-types/<str:ticket_type_id>",
        TicketTypeDetailView.as_view(),
        name="ticket-type-detail",
    ),
    path(
        "events/<str:event_id>/discount-codes",
        DiscountCodeListView.as_view(),
        name="discount-code-list",
    ),
    path(
        "events/<str:event_id>/discount-codes/<str:discount_code_id>",
        DiscountCodeDetailView.as_view(),
        name="discount-code-detail",
    ),
    path(
        "events/<str:event_id>/discount-codes/<str:code>/validate",
        DiscountCodeValidateView.as_view(),
        name="discount-code-validate",
    ),
    path(
        "events/<str:event_id>/cancellation-policy",
        CancellationPolicyView.as_view(),
        name="cancellation-policy",
    ),
    path(
        "events/<str:event_id>/registrations",
        EventRegistrationsView.as_view(),
        name="event-registrations",
    ),
    path("events/<str:event_id>/waitlist", WaitlistView.as_view(), name="waitlist"),
    path(
        "events/<str:event_id>/waitlist/<str:ticket_type_id>",
        WaitlistView.as_view(),
        name="waitlist-ticket-type",
    ),
    path(
        "registrations/by-email/<str:email>",
        RegistrationsByEmailView.as_view(),
        name="registrations-by-email",
    ),
    path(
        "registrations/<str:registration_id>",
        RegistrationDetailView.as_view(),
        name="registration-detail",
    ),
    path(
        "registrations/<str:registration_id>/cancel",
        RegistrationCancelView.as_view(),
        name="registration-cancel",
    ),
    path("waitlist/<str:entry_id>", WaitlistEntryView.as_view(), name="waitlist-entry"),
]

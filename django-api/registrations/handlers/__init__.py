from registrations.handlers.views import (
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

__all__ = [
    "CancellationPolicyView",
    "CapacityView",
    "DiscountCodeDetailView",
    "DiscountCodeListView",
    "DiscountCodeValidateView",
    "EventDetailView",
    "EventListView",
    "EventRegistrationsView",
    "RegistrationCancelView",
    "RegistrationDetailView",
    "RegistrationsByEmailView",
    "TicketTypeDetailView",
    "TicketTypeListView",
    "WaitlistEntryView",
    "WaitlistView",
]

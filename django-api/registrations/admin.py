from django.contrib import admin

from registrations.models import (
    CancellationPolicy,
    DiscountCode,
    Event,
    Registration,
    TicketType,
    WaitlistEntry,
)


class TicketTypeInline(admin.TabularInline):
    model = TicketType
    extra = 1


class CancellationPolicyInline(admin.StackedInline):
    model = CancellationPolicy
    extra = 0


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["name", "venue_name", "start_date", "status", "overall_capacity"]
    list_filter = ["status"]
    search_fields = ["name", "venue_name"]
    inlines = [TicketTypeInline, CancellationPolicyInline]


@admin.register(TicketType)
class TicketTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "price", "capacity"]
    list_filter = ["event"]


# Status and waitlist order are owned by the registration coordinator.
@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["email", "event", "ticket_type", "status", "total_amount", "registration_date"]
    list_filter = ["status", "event"]
    search_fields = ["email", "first_name", "last_name"]
    readonly_fields = ["status", "total_amount", "discount_code_used", "registration_date"]


@admin.register(WaitlistEntry)
class WaitlistEntryAdmin(admin.ModelAdmin):
    list_display = ["email", "event", "ticket_type", "position", "joined_date"]
    list_filter = ["event"]
    readonly_fields = ["position", "joined_date"]


@admin.register(DiscountCode)
class DiscountCodeAdmin(admin.ModelAdmin):
    list_display = ["code", "event", "discount_type", "discount_value", "current_uses", "max_uses", "status"]
    list_filter = ["status", "discount_type"]
    search_fields = ["code"]
    readonly_fields = ["current_uses"]

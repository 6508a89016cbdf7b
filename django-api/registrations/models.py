"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models
from django.db.models.functions import Lower


class Event(models.Model):
    """Persistence model for events."""

    class Status(models.TextChoices):
        DRAFT = "Draft"
        PUBLISHED = "Published"
        CANCELLED = "Cancelled"
        COMPLETED = "Completed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    venue_name = models.CharField(max_length=255, blank=True, default="")
    venue_address = models.CharField(max_length=500, blank=True, default="")
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    overall_capacity = models.PositiveIntegerField()
    registration_deadline = models.DateTimeField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="event_created_idx"),
            models.Index(fields=["status"], name="event_status_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class TicketType(models.Model):
    """Persistence model for ticket types."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="ticket_types")
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(max_digits=10, decimal_places=2)
    capacity = models.PositiveIntegerField()
    available_from = models.DateTimeField(blank=True, null=True)
    available_until = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["event"], name="tickettype_event_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class Registration(models.Model):
    """Persistence model for registrations. Rows are never deleted."""

    class Status(models.TextChoices):
        CONFIRMED = "Confirmed"
        WAITLISTED = "Waitlisted"
        CANCELLED = "Cancelled"
        REFUNDED = "Refunded"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="registrations")
    ticket_type = models.ForeignKey(
        TicketType, on_delete=models.PROTECT, related_name="registrations"
    )
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField()
    phone_number = models.CharField(max_length=50, blank=True, null=True)
    registration_date = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.CONFIRMED)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    discount_code_used = models.CharField(max_length=50, blank=True, null=True)

    class Meta:
        ordering = ["registration_date"]
        indexes = [
            models.Index(fields=["event", "email"], name="registration_event_email_idx"),
            models.Index(fields=["ticket_type", "status"], name="registration_tt_status_idx"),
            models.Index(fields=["event", "status"], name="registration_event_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.email} - {self.status}"


class WaitlistEntry(models.Model):
    """Persistence model for waitlist entries."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="waitlist_entries")
    ticket_type = models.ForeignKey(
        TicketType, on_delete=models.CASCADE, related_name="waitlist_entries"
    )
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField()
    phone_number = models.CharField(max_length=50, blank=True, null=True)
    position = models.PositiveIntegerField()
    joined_date = models.DateTimeField()
    promotion_expiry = models.DateTimeField(blank=True, null=True)
    discount_code = models.CharField(max_length=50, blank=True, null=True)

    class Meta:
        ordering = ["position"]
        verbose_name_plural = "waitlist entries"
        constraints = [
            models.UniqueConstraint(
                fields=["event", "ticket_type", "position"],
                name="unique_waitlist_position",
            ),
        ]

    def __str__(self) -> str:
        return f"#{self.position} {self.email}"


class DiscountCode(models.Model):
    """Persistence model for discount codes."""

    class DiscountType(models.TextChoices):
        PERCENTAGE = "Percentage"
        FIXED_AMOUNT = "FixedAmount"

    class Status(models.TextChoices):
        ACTIVE = "Active"
        INACTIVE = "Inactive"
        EXPIRED = "Expired"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="discount_codes")
    code = models.CharField(max_length=50)
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2)
    max_uses = models.PositiveIntegerField(blank=True, null=True)
    current_uses = models.PositiveIntegerField(default=0)
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()
    applicable_ticket_type_ids = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)

    class Meta:
        ordering = ["code"]
        constraints = [
            models.UniqueConstraint(
                Lower("code"),
                "event",
                name="unique_discount_code_per_event",
            ),
        ]

    def __str__(self) -> str:
        return self.code


class CancellationPolicy(models.Model):
    """Persistence model for an event's cancellation policy."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.OneToOneField(
        Event, on_delete=models.CASCADE, related_name="cancellation_policy"
    )
    full_refund_deadline_days = models.IntegerField()
    partial_refund_deadline_days = models.IntegerField()
    partial_refund_percentage = models.IntegerField()
    no_refund_after_days = models.IntegerField()
    cancellation_fee = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)

    class Meta:
        verbose_name_plural = "cancellation policies"

    def __str__(self) -> str:
        return f"Cancellation policy for {self.event_id}"

"""Serializers for request parsing and for turning domain models into API responses.

Input serializers only check shape and types; business rules are applied by
the services. Their field names match the dataclasses in
registrations/domain/inputs.py so validated_data can be passed straight through.
"""

from rest_framework import serializers

from registrations.domain import DiscountStatus, DiscountType, EventStatus

MONEY = {"max_digits": 10, "decimal_places": 2}


# Responses


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    description = serializers.CharField()
    venue_name = serializers.CharField()
    venue_address = serializers.CharField()
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    overall_capacity = serializers.IntegerField(source="overall_capacity.value")
    registration_deadline = serializers.DateTimeField(allow_null=True)
    status = serializers.CharField(source="status.value")
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class TicketTypeSerializer(serializers.Serializer):
    """Serializer for TicketType domain model."""

    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    name = serializers.CharField()
    description = serializers.CharField()
    price = serializers.DecimalField(source="price.amount", **MONEY)
    capacity = serializers.IntegerField(source="capacity.value")
    available_from = serializers.DateTimeField(allow_null=True)
    available_until = serializers.DateTimeField(allow_null=True)


class RegistrationSerializer(serializers.Serializer):
    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    ticket_type_id = serializers.UUIDField(source="ticket_type_id.value")
    first_name = serializers.CharField(source="attendee.first_name")
    last_name = serializers.CharField(source="attendee.last_name")
    email = serializers.CharField(source="attendee.email")
    phone_number = serializers.CharField(source="attendee.phone_number", allow_null=True)
    registration_date = serializers.DateTimeField()
    status = serializers.CharField(source="status.value")
    total_amount = serializers.DecimalField(source="total_amount.amount", **MONEY)
    discount_code_used = serializers.CharField(allow_null=True)


class WaitlistEntrySerializer(serializers.Serializer):
    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    ticket_type_id = serializers.UUIDField(source="ticket_type_id.value")
    first_name = serializers.CharField(source="attendee.first_name")
    last_name = serializers.CharField(source="attendee.last_name")
    email = serializers.CharField(source="attendee.email")
    position = serializers.IntegerField()
    joined_date = serializers.DateTimeField()
    discount_code = serializers.CharField(allow_null=True)


class DiscountCodeSerializer(serializers.Serializer):
    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    code = serializers.CharField()
    discount_type = serializers.CharField(source="discount_type.value")
    discount_value = serializers.DecimalField(**MONEY)
    max_uses = serializers.IntegerField(allow_null=True)
    current_uses = serializers.IntegerField()
    valid_from = serializers.DateTimeField()
    valid_until = serializers.DateTimeField()
    status = serializers.CharField(source="status.value")
    applicable_ticket_type_ids = serializers.SerializerMethodField()

    def get_applicable_ticket_type_ids(self, obj) -> list[str]:
        return [str(ticket_type_id) for ticket_type_id in obj.applicable_ticket_type_ids]


class CancellationPolicySerializer(serializers.Serializer):
    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    full_refund_deadline_days = serializers.IntegerField()
    partial_refund_deadline_days = serializers.IntegerField()
    partial_refund_percentage = serializers.IntegerField()
    no_refund_after_days = serializers.IntegerField()
    cancellation_fee = serializers.DecimalField(source="cancellation_fee.amount", allow_null=True, **MONEY)


class CancellationResultSerializer(serializers.Serializer):
    registration_id = serializers.UUIDField(source="registration_id.value")
    status = serializers.CharField(source="status.value")
    refund_amount = serializers.DecimalField(source="refund_amount.amount", **MONEY)
    refund_reason = serializers.CharField()
    promoted_registration_id = serializers.UUIDField(source="promoted.id.value", allow_null=True)


class TicketTypeCapacitySerializer(serializers.Serializer):
    ticket_type_id = serializers.UUIDField(source="ticket_type_id.value")
    name = serializers.CharField()
    capacity = serializers.IntegerField()
    confirmed = serializers.IntegerField()
    available = serializers.IntegerField()


class CapacitySnapshotSerializer(serializers.Serializer):
    event_id = serializers.UUIDField(source="event_id.value")
    overall_capacity = serializers.IntegerField()
    confirmed = serializers.IntegerField()
    available = serializers.IntegerField()
    ticket_types = TicketTypeCapacitySerializer(many=True)


class DiscountValidationSerializer(serializers.Serializer):
    is_valid = serializers.BooleanField()
    message = serializers.CharField(allow_null=True)
    original_price = serializers.DecimalField(source="original_price.amount", **MONEY)
    discount_amount = serializers.DecimalField(source="discount_amount.amount", allow_null=True, **MONEY)
    final_price = serializers.DecimalField(source="final_price.amount", allow_null=True, **MONEY)


# Requests


class EventInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    venue_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    venue_address = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    overall_capacity = serializers.IntegerField()
    registration_deadline = serializers.DateTimeField(required=False, allow_null=True, default=None)
    status = serializers.ChoiceField(
        choices=[status.value for status in EventStatus], default=EventStatus.DRAFT.value
    )


class TicketTypeInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    price = serializers.DecimalField(**MONEY)
    capacity = serializers.IntegerField()
    available_from = serializers.DateTimeField(required=False, allow_null=True, default=None)
    available_until = serializers.DateTimeField(required=False, allow_null=True, default=None)


class DiscountCodeInputSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    discount_type = serializers.ChoiceField(choices=[choice.value for choice in DiscountType])
    discount_value = serializers.DecimalField(**MONEY)
    max_uses = serializers.IntegerField(required=False, allow_null=True, min_value=1, default=None)
    valid_from = serializers.DateTimeField()
    valid_until = serializers.DateTimeField()
    applicable_ticket_type_ids = serializers.ListField(
        child=serializers.CharField(), required=False, default=list
    )
    status = serializers.ChoiceField(
        choices=[choice.value for choice in DiscountStatus], default=DiscountStatus.ACTIVE.value
    )

    def validate_applicable_ticket_type_ids(self, value: list[str]) -> tuple[str, ...]:
        return tuple(value)


class CancellationPolicyInputSerializer(serializers.Serializer):
    full_refund_deadline_days = serializers.IntegerField()
    partial_refund_deadline_days = serializers.IntegerField()
    partial_refund_percentage = serializers.IntegerField()
    no_refund_after_days = serializers.IntegerField()
    cancellation_fee = serializers.DecimalField(required=False, allow_null=True, default=None, **MONEY)


class RegistrationInputSerializer(serializers.Serializer):
    # Names and email are checked by the domain so the messages stay consistent.
    first_name = serializers.CharField(max_length=100, allow_blank=True)
    last_name = serializers.CharField(max_length=100, allow_blank=True)
    email = serializers.CharField(max_length=254, allow_blank=True)
    phone_number = serializers.CharField(
        max_length=20, required=False, allow_blank=True, allow_null=True, default=None
    )
    ticket_type_id = serializers.CharField()
    discount_code = serializers.CharField(
        max_length=50, required=False, allow_blank=True, allow_null=True, default=None
    )


class DiscountValidationInputSerializer(serializers.Serializer):
    ticket_type_id = serializers.CharField()

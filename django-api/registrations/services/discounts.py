"""Discount code validation and pricing."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import assert_never

import structlog
from django.utils import timezone

from registrations.domain import (
    DiscountCode,
    DiscountStatus,
    DiscountType,
    EventId,
    Money,
    TicketType,
    TicketTypeId,
)
from registrations.domain.errors import InvalidDiscountError, TicketTypeNotFoundError
from registrations.stores.interfaces import DiscountCodeStore, EventStore

logger = structlog.get_logger(__name__)


class DiscountRejection(Enum):
    """Why a code was refused, in the order the checks run."""

    NOT_FOUND = "Invalid discount code"
    INACTIVE = "Discount code is not active"
    EXPIRED = "Discount code is not valid at this time"
    MAX_USES_REACHED = "Discount code has reached its maximum uses"
    NOT_APPLICABLE = "Discount code is not applicable to this ticket type"


@dataclass(frozen=True)
class DiscountResult:
    original_price: Money
    discount_code: DiscountCode | None = None
    final_price: Money | None = None
    rejection: DiscountRejection | None = None

    @property
    def is_valid(self) -> bool:
        return self.rejection is None

    @property
    def message(self) -> str | None:
        return self.rejection.value if self.rejection else None

    @property
    def discount_amount(self) -> Money | None:
        if self.final_price is None:
            return None
        return Money.of(self.original_price.amount - self.final_price.amount)


def apply_discount(price: Money, discount_type: DiscountType, value: Decimal) -> Money:
    """Return the discounted price, never below zero."""
    match discount_type:
        case DiscountType.PERCENTAGE:
            discounted = price.amount * (1 - value / Decimal(100))
        case DiscountType.FIXED_AMOUNT:
            discounted = price.amount - value
        case _:
            assert_never(discount_type)
    return Money.of(discounted)


class DiscountEngine:
    """Checks a code against its constraints and prices a ticket type with it."""

    def __init__(
        self,
        discount_codes: DiscountCodeStore,
        events: EventStore,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._discount_codes = discount_codes
        self._events = events
        self._clock = clock

    def validate(
        self,
        code: str,
        ticket_type_id: TicketTypeId,
        event_id: EventId,
        now: datetime | None = None,
    ) -> DiscountResult:
        """Validate a code for a ticket type of the event.

        Raises:
            TicketTypeNotFoundError: If the ticket type is missing or belongs to another event.
        """
        ticket_type = self._events.get_ticket_type(ticket_type_id)
        if ticket_type is None or ticket_type.event_id != event_id:
            raise TicketTypeNotFoundError()
        return self.evaluate(code, ticket_type, now)

    def evaluate(self, code: str, ticket_type: TicketType, now: datetime | None = None) -> DiscountResult:
        """Run the checks in order; the first failure wins."""
        now = now or self._clock()
        price = ticket_type.price
        discount_code = self._discount_codes.find_by_code(ticket_type.event_id, code)
        if discount_code is None:
            return DiscountResult(original_price=price, rejection=DiscountRejection.NOT_FOUND)

        rejection = None
        if discount_code.status is not DiscountStatus.ACTIVE:
            rejection = DiscountRejection.INACTIVE
        elif not discount_code.is_valid_at(now):
            rejection = DiscountRejection.EXPIRED
        elif discount_code.is_exhausted:
            rejection = DiscountRejection.MAX_USES_REACHED
        elif not discount_code.applies_to(ticket_type.id):
            rejection = DiscountRejection.NOT_APPLICABLE
        if rejection is not None:
            return DiscountResult(original_price=price, discount_code=discount_code, rejection=rejection)

        return DiscountResult(
            original_price=price,
            discount_code=discount_code,
            final_price=apply_discount(price, discount_code.discount_type, discount_code.discount_value),
        )

    def redeem(self, discount_code: DiscountCode) -> None:
        """Count one use of the code.

        Must run inside the same atomic block as the registration write it pays for.

        Raises:
            InvalidDiscountError: If the last use was taken concurrently.
        """
        if not self.try_redeem(discount_code):
            raise InvalidDiscountError(DiscountRejection.MAX_USES_REACHED.value)

    def try_redeem(self, discount_code: DiscountCode) -> bool:
        redeemed = self._discount_codes.increment_uses(discount_code.id)
        log = logger.bind(discount_code_id=str(discount_code.id), code=discount_code.code)
        if redeemed:
            log.info("discount_code_redeemed")
        else:
            log.warning("discount_code_redeem_refused")
        return redeemed

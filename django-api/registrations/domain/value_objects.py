"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Self
from uuid import UUID, uuid4

CENT = Decimal("0.01")


@dataclass(frozen=True)
class EntityId:
    """Base for UUID-backed identifiers."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EventId(EntityId):
    """Unique identifier for an Event."""


@dataclass(frozen=True)
class TicketTypeId(EntityId):
    """Unique identifier for a TicketType."""


@dataclass(frozen=True)
class RegistrationId(EntityId):
    """Unique identifier for a Registration."""


@dataclass(frozen=True)
class WaitlistEntryId(EntityId):
    """Unique identifier for a WaitlistEntry."""


@dataclass(frozen=True)
class DiscountCodeId(EntityId):
    """Unique identifier for a DiscountCode."""


@dataclass(frozen=True)
class CancellationPolicyId(EntityId):
    """Unique identifier for a CancellationPolicy."""


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def of(cls, amount: Decimal | int | str) -> Self:
        """Build a cent-rounded amount, clamping negative results to zero."""
        return cls(amount=to_cents(max(Decimal("0"), Decimal(amount))))

    @classmethod
    def zero(cls) -> Self:
        return cls(amount=Decimal("0.00"))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")

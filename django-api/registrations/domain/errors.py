"""Domain error codes for the registrations module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TICKET_TYPE_NOT_FOUND = "TICKET_TYPE_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    WAITLIST_ENTRY_NOT_FOUND = "WAITLIST_ENTRY_NOT_FOUND"
    DISCOUNT_CODE_NOT_FOUND = "DISCOUNT_CODE_NOT_FOUND"
    CANCELLATION_POLICY_NOT_FOUND = "CANCELLATION_POLICY_NOT_FOUND"
    INVALID_ID = "INVALID_ID"
    INVALID_INPUT = "INVALID_INPUT"
    EVENT_NOT_PUBLISHED = "EVENT_NOT_PUBLISHED"
    DEADLINE_PASSED = "DEADLINE_PASSED"
    INVALID_DISCOUNT = "INVALID_DISCOUNT"
    CAPACITY_LIMIT = "CAPACITY_LIMIT"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    DUPLICATE_DISCOUNT_CODE = "DUPLICATE_DISCOUNT_CODE"
    DISCOUNT_CODE_IN_USE = "DISCOUNT_CODE_IN_USE"
    CANCELLATION_POLICY_EXISTS = "CANCELLATION_POLICY_EXISTS"
    REGISTRATIONS_EXIST = "REGISTRATIONS_EXIST"


class ErrorKind(Enum):
    """Coarse error families the transport layer maps onto status codes."""

    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    CONFLICT = "CONFLICT"
    POLICY_VIOLATION = "POLICY_VIOLATION"


ERROR_KINDS: dict[ErrorCode, ErrorKind] = {
    ErrorCode.EVENT_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.TICKET_TYPE_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.REGISTRATION_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.WAITLIST_ENTRY_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.DISCOUNT_CODE_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.CANCELLATION_POLICY_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.INVALID_ID: ErrorKind.INVALID_INPUT,
    ErrorCode.INVALID_INPUT: ErrorKind.INVALID_INPUT,
    ErrorCode.EVENT_NOT_PUBLISHED: ErrorKind.POLICY_VIOLATION,
    ErrorCode.DEADLINE_PASSED: ErrorKind.POLICY_VIOLATION,
    ErrorCode.INVALID_DISCOUNT: ErrorKind.POLICY_VIOLATION,
    ErrorCode.CAPACITY_LIMIT: ErrorKind.POLICY_VIOLATION,
    ErrorCode.DUPLICATE_EMAIL: ErrorKind.CONFLICT,
    ErrorCode.ALREADY_CANCELLED: ErrorKind.CONFLICT,
    ErrorCode.DUPLICATE_DISCOUNT_CODE: ErrorKind.CONFLICT,
    ErrorCode.DISCOUNT_CODE_IN_USE: ErrorKind.CONFLICT,
    ErrorCode.CANCELLATION_POLICY_EXISTS: ErrorKind.CONFLICT,
    ErrorCode.REGISTRATIONS_EXIST: ErrorKind.CONFLICT,
}


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    @property
    def kind(self) -> ErrorKind:
        return ERROR_KINDS[self.code]

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message="Event not found")


class TicketTypeNotFoundError(DomainError):
    """Raised when a ticket type is missing or belongs to another event."""

    def __init__(self) -> None:
        super().__init__(code=ErrorCode.TICKET_TYPE_NOT_FOUND, message="Ticket type not found")


class RegistrationNotFoundError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.REGISTRATION_NOT_FOUND, message="Registration not found")


class WaitlistEntryNotFoundError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.WAITLIST_ENTRY_NOT_FOUND, message="Waitlist entry not found")


class DiscountCodeNotFoundError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.DISCOUNT_CODE_NOT_FOUND, message="Discount code not found")


class CancellationPolicyNotFoundError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CANCELLATION_POLICY_NOT_FOUND,
            message="Cancellation policy not found",
        )


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, label: str = "ID") -> None:
        super().__init__(code=ErrorCode.INVALID_ID, message=f"Invalid {label} format")


class InvalidInputError(DomainError):
    """Raised when attendee or catalog data is malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_INPUT, message=message)


class EventNotPublishedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_PUBLISHED,
            message="Event must be published to accept registrations",
        )


class DeadlinePassedError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.DEADLINE_PASSED, message="Registration deadline has passed")


class InvalidDiscountError(DomainError):
    """Raised when a discount code cannot be applied; message says why."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_DISCOUNT, message=message)


class CapacityLimitError(DomainError):
    """Raised by catalog edits that would break capacity invariants."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.CAPACITY_LIMIT, message=message)


class DuplicateEmailError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_EMAIL,
            message="Email already registered for this event",
        )


class AlreadyCancelledError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_CANCELLED,
            message="Registration is already cancelled",
        )


class DuplicateDiscountCodeError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_DISCOUNT_CODE,
            message="Discount code already exists for this event",
        )


class DiscountCodeInUseError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DISCOUNT_CODE_IN_USE,
            message="Cannot delete discount code that has been used",
        )


class CancellationPolicyExistsError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CANCELLATION_POLICY_EXISTS,
            message="Event already has a cancellation policy",
        )


class RegistrationsExistError(DomainError):
    """Raised when a change is blocked by existing registrations."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.REGISTRATIONS_EXIST, message=message)

from typing import TypeVar

from registrations.domain.errors import InvalidIdError
from registrations.domain.value_objects import EntityId

IdT = TypeVar("IdT", bound=EntityId)


def parse_id(id_type: type[IdT], raw: str | IdT, label: str) -> IdT:
    """Parse a raw identifier.

    Raises:
        InvalidIdError: If the value is not a valid UUID.
    """
    if isinstance(raw, id_type):
        return raw
    try:
        return id_type.from_string(str(raw))
    except ValueError as exc:
        raise InvalidIdError(label) from exc

"""Identifier parsing shared by the services."""

from typing import TypeVar

from entitlements.domain.errors import InvalidIdError

T = TypeVar("T")


def parse_id(id_type: type[T], value: str, field: str) -> T:
    """Parse a raw identifier into its value object or raise InvalidIdError."""
    try:
        return id_type.from_string(value)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError(field) from None

"""
Shared domain value objects for the record store.

Identifiers, money and quantity parsing used by both the catalog and the
ordering contexts.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID, uuid4

from ..exceptions import InvalidReferenceError, ValidationError


def new_id() -> str:
    """Generate a fresh entity identifier."""
    return str(uuid4())


def is_valid_id(value: Any) -> bool:
    """Check whether a value is a well-formed entity identifier."""
    if not isinstance(value, str):
        return False
    try:
        return str(UUID(value)) == value.lower()
    except ValueError:
        return False


def require_valid_id(value: Any, kind: str) -> str:
    """Return the identifier in canonical form or raise InvalidReferenceError."""
    if not is_valid_id(value):
        raise InvalidReferenceError(kind, value)
    return value.lower()


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_price(value: Any) -> Decimal:
    """Parse a non-negative price into an exact Decimal."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Price must be a number, got {value!r}")
    try:
        # str() first so floats keep their printed value rather than binary noise
        price = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Price must be a number, got {value!r}")
    if not price.is_finite():
        raise ValidationError(f"Price must be finite, got {value!r}")
    if price < 0:
        raise ValidationError(f"Price must not be negative, got {value!r}")
    return price


def parse_quantity(value: Any, minimum: int = 0) -> int:
    """Parse a whole-unit quantity no smaller than ``minimum``."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Quantity must be an integer, got {value!r}")
    if value < minimum:
        raise ValidationError(f"Quantity must be at least {minimum}, got {value}")
    return value


def parse_text(value: Any, field_name: str) -> str:
    """Parse a required, non-blank string field."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string")
    return value.strip()

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError

E = TypeVar("E", bound=Enum)


def require_text(value: Any, field_name: str) -> Optional[str]:
    """Optional free text: None or blank becomes None, anything but a string is rejected."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    return value.strip() or None


def require_non_empty(value: Any, field_name: str) -> str:
    text = require_text(value, field_name)
    if not text:
        raise ValidationError(f"{field_name} is required")
    return text


def require_min_length(value: Any, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_enum(enum_cls: Type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def require_non_negative_amount(value, field_name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field_name} must be a non-negative number")
    return amount


def require_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValidationError(f"{field_name} must be a whole number")


def require_admin(caller_role: Role) -> None:
    if caller_role != Role.ADMIN:
        raise AuthorizationError("Admin access required")

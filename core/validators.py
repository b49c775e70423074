# core/validators.py
from enum import Enum
from typing import Optional, Type

from core.errors import InvalidInput


def parse_choice(enum_cls: Type[Enum], value: Optional[str], message: Optional[str] = None) -> str:
    """Return the stored value for ``value`` or raise InvalidInput listing the allowed choices."""
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInput(message or f"Invalid {enum_cls.__name__}. Allowed values are: {allowed}.")


def require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise InvalidInput(f"The {field} field is required.")
    return value.strip()

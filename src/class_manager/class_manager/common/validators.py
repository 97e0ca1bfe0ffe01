from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_id(value: Any, field_name: str) -> int:
    """Positive integer id (form fields and JSON bodies arrive as str or int)."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field_name}")
    if isinstance(value, int):
        num = value
    else:
        text = str(value if value is not None else "").strip()
        if not text.isdigit():
            raise ValidationError(f"Invalid {field_name}")
        num = int(text)
    if num <= 0:
        raise ValidationError(f"Invalid {field_name}")
    return num


def require_non_negative_amount(value: Any, field_name: str) -> int:
    try:
        amount = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}")
    if amount < 0:
        raise ValidationError(f"Invalid {field_name}")
    return amount


def require_positive_amount(value: Any, field_name: str) -> int:
    amount = require_non_negative_amount(value, field_name)
    if amount == 0:
        raise ValidationError(f"{field_name} required")
    return amount

from __future__ import annotations

import re
from datetime import date, datetime

from ..core.exceptions import ValidationError

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError("Date must be YYYY-MM-DD")


def month_key(value: date) -> str:
    """Calendar month of a date as ``YYYY-MM``."""
    return f"{value.year:04d}-{value.month:02d}"


def require_month(value: str) -> str:
    value = (value or "").strip()
    if not _MONTH_RE.match(value):
        raise ValidationError("Month must be YYYY-MM")
    return value


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()

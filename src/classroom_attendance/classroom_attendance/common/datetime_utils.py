from __future__ import annotations

from datetime import date, datetime
from typing import Union

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def coerce_date(value: Union[date, str, None], field_name: str = "Date") -> date:
    """Accept a date or an ISO string coming from a form or JSON body."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field_name} must use the YYYY-MM-DD format")


def now_local() -> datetime:
    """Clock read by services when the caller passes no explicit `now`."""
    return datetime.now()

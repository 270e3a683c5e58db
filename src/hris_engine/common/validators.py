from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_date_range(start: date, end: Optional[date], *, field_name: str = "date range") -> None:
    """Reject ranges whose end lies before their start (open end is allowed)."""
    if end is not None and end < start:
        raise ValidationError(f"Invalid {field_name}: end {end} is before start {start}")


def clean_note(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None

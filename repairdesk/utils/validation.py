from __future__ import annotations
"""Reusable validation helpers for request payloads and domain values.

Keeps blank-field checks and status parsing in one place so every caller
raises the same ValidationFailure (400).
"""
import time
from typing import Dict, Iterable, Optional
from repairdesk.errors import ValidationFailure
from repairdesk.models.work_order import WorkOrder

# Enum-style aliases accepted in query strings alongside the persisted values
STATUS_ALIASES = {
    'pending': WorkOrder.STATUS_PENDING,
    'working': WorkOrder.STATUS_WORKING,
    'finished': WorkOrder.STATUS_FINISHED,
}


def is_blank(value: Optional[str]) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_text(fields: Dict[str, object]):
    """Raise ValidationFailure naming every present field that is not a string."""
    wrong = [name for name, value in fields.items() if value is not None and not isinstance(value, str)]
    if wrong:
        raise ValidationFailure(f"{', '.join(wrong)} must be a string")


def require_non_blank(fields: Dict[str, Optional[str]]):
    """Raise ValidationFailure naming every blank (or non-string) field."""
    require_text(fields)
    missing = [name for name, value in fields.items() if is_blank(value)]
    if missing:
        raise ValidationFailure(f"{', '.join(missing)} required")


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or raises ValidationFailure.
    """
    if new_status not in allowed:
        raise ValidationFailure(f"{field_name} invalid")
    return new_status


def parse_status(raw: Optional[str]) -> str:
    """Map a persisted status value or its alias (case-insensitive) to the persisted value."""
    if is_blank(raw):
        raise ValidationFailure('status required')
    raw = raw.strip()
    alias = STATUS_ALIASES.get(raw.lower())
    if alias:
        return alias
    return validate_status(raw, WorkOrder.ALL_STATUSES)


def now_ms() -> int:
    return int(time.time() * 1000)

__all__ = ['is_blank', 'require_text', 'require_non_blank', 'validate_status', 'parse_status', 'now_ms', 'STATUS_ALIASES']

#!/usr/bin/env python3
"""
Utility functions for the web application.
"""

from decimal import Decimal
from typing import Optional, Any
from datetime import date, datetime


def safe_float(value: Optional[Any], default: float = 0.0) -> float:
    """
    Safely convert value to float.

    Args:
        value: Value to convert (can be Decimal, int, float, or None).
        default: Default value if conversion fails or value is None.

    Returns:
        Float value.
    """
    if value is None:
        return default

    if isinstance(value, Decimal):
        return float(value)

    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def safe_datetime_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Render a timestamp column for a response body.

    Args:
        dt: Timezone-aware datetime, or None for an unset column.

    Returns:
        ISO 8601 string, or None when dt is None.
    """
    if dt is None:
        return None
    return dt.isoformat()


def safe_date_iso(value: Optional[date]) -> str:
    """
    Render a game date for a response body.

    Args:
        value: Date (a datetime is truncated to its date), or None.

    Returns:
        YYYY-MM-DD string, or "" when value is None.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()

"""Utilities module for the FinTrack backend.

This package contains shared utility functions used across the application.
"""

from .numbers import (
    ZERO,
    clean_number,
    to_decimal,
    floor_decimal,
    safe_percentage,
)
from .time_utils import (
    resolve_time_range,
    get_date_range_description,
    parse_date_string,
    is_stale,
)

__all__ = [
    "ZERO",
    "clean_number",
    "to_decimal",
    "floor_decimal",
    "safe_percentage",
    "resolve_time_range",
    "get_date_range_description",
    "parse_date_string",
    "is_stale",
]

"""
Canonical value formatting for metadata comparison.

Every attribute value is reduced to a canonical string before it is
compared. Two values are equal if and only if their canonical strings
are identical. No numeric or semantic tolerance is applied.
"""
from datetime import date, datetime
from enum import Enum
from typing import Any
import json


def format_value(value: Any) -> str:
    """
    Convert an attribute value into its canonical string form.

    - None -> ""
    - bool -> "True" / "False"
    - datetime / date -> ISO 8601
    - float -> shortest round-trip repr, never locale formatted
    - Enum -> canonical form of its value
    """
    if value is None:
        return ""
    if isinstance(value, Enum):
        return format_value(value.value)
    if isinstance(value, str):
        return value
    # bool must be checked before int
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, float):
        return repr(value)
    # int, Decimal and anything else use their natural text form
    return str(value)


def values_equal(source: Any, target: Any) -> bool:
    """Compare two values by canonical string."""
    return format_value(source) == format_value(target)


def format_value_compact(value: Any) -> str:
    """Format a value for display in a compact way."""
    if value is None:
        return "null"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(',', ':'), default=str)
    return format_value(value)

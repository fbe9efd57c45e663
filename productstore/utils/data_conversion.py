# productstore/utils/data_conversion.py
# Lenient conversions for request parameters and raw column values.

from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from .logger import logger

def safe_int(value: Any) -> Optional[int]:
    """Converts a value to int, returning None on failure. Booleans are rejected."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, float):
            return int(value) if value.is_integer() else None
        if isinstance(value, Decimal):
            return int(value) if value == value.to_integral_value() else None
        if isinstance(value, str):
            value = value.strip()
        return int(value)
    except (ValueError, TypeError) as e:
        logger.debug(f"Could not convert '{value}' (type: {type(value)}) to int: {e}")
        return None

def safe_float(value: Any) -> Optional[float]:
    """Converts a value to float, returning None on failure (NaN/inf included)."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(Decimal(str(value).strip())) if isinstance(value, str) else float(value)
    except (ValueError, TypeError, InvalidOperation) as e:
        logger.debug(f"Could not convert '{value}' (type: {type(value)}) to float: {e}")
        return None
    if result != result or result in (float('inf'), float('-inf')):
        return None
    return result

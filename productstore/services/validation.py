# productstore/services/validation.py
# Input checks shared by the product and order services.

from decimal import Decimal
from typing import Any, Iterable, List, Optional

from productstore.utils.data_conversion import safe_float
from productstore.api.errors import ValidationError

# Identifier columns are 32-bit INTEGER
MAX_ID = 2**31 - 1

# price is NUMERIC(12, 2): ten integer digits, two decimals
MAX_PRICE = 10**10
PRICE_DECIMALS = 2

def validate_id(value: Any, label: str = "ID") -> int:
    """Returns `value` as an int in 1..MAX_ID or raises ValidationError."""
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= MAX_ID:
        raise ValidationError(f"Invalid {label}: {value!r}. Expected an integer between 1 and {MAX_ID}.")
    return value

def validate_ids(values: Any, label: str = "ID") -> List[int]:
    """Validates a collection of ids; duplicates are kept for the caller to collapse."""
    if values is None or isinstance(values, (str, bytes, dict)) or not isinstance(values, Iterable):
        raise ValidationError(f"Expected a list of {label}s, got {values!r}.")
    return [validate_id(value, label) for value in values]

def validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Product name cannot be empty.")
    return name.strip()

def validate_price(price: Any) -> float:
    """
    Accepts a finite, non-negative price below MAX_PRICE with at most two
    decimals, so the stored NUMERIC value reads back unchanged.
    """
    value = safe_float(price) if not isinstance(price, bool) else None
    if value is None:
        raise ValidationError(f"Product price must be numeric, got {price!r}.")
    if value < 0:
        raise ValidationError(f"Product price cannot be negative, got {value}.")
    if value >= MAX_PRICE:
        raise ValidationError(f"Product price must be below {MAX_PRICE}, got {value}.")
    if Decimal(repr(value)).as_tuple().exponent < -PRICE_DECIMALS:
        raise ValidationError(f"Product price cannot have more than {PRICE_DECIMALS} decimal places, got {value}.")
    return value

def validate_optional_id(value: Any, label: str) -> Optional[int]:
    return None if value is None else validate_id(value, label)

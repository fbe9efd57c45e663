# productstore/database/pagination.py
# Offset/limit paging over a base query ordered by identifier.

from typing import Any, Callable, List, TypeVar
from sqlalchemy.orm import Session

from productstore.api.errors import ValidationError
from .executor import execute_query
from .row_mapper import map_rows

T = TypeVar("T")

# LIMIT and OFFSET are bound as signed 64-bit integers
MAX_ROW_BOUND = 2**63 - 1

def validate_page(page_number: Any, page_size: Any) -> int:
    """Validates the page bounds and returns the row offset of the page."""
    for label, value in (("page number", page_number), ("page size", page_size)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"The {label} must be an integer, got {value!r}.")
        if value < 1:
            raise ValidationError(f"The {label} must be at least 1, got {value}.")
    if page_number * page_size > MAX_ROW_BOUND:
        raise ValidationError(f"Page {page_number} of size {page_size} is beyond the last addressable row.")
    return (page_number - 1) * page_size

def fetch_page(db: Session, base_sql: str, page_number: int, page_size: int,
               mapper: Callable[[Any], T]) -> List[T]:
    """
    Returns at most `page_size` mapped rows of `base_sql` starting at
    (page_number - 1) * page_size, in identifier order.

    `base_sql` must be a plain SELECT without ORDER BY / LIMIT clauses.
    """
    offset = validate_page(page_number, page_size)
    sql = f"{base_sql} ORDER BY id LIMIT :limit OFFSET :offset"
    return execute_query(db, sql, {"limit": page_size, "offset": offset}, lambda rs: map_rows(rs, mapper))

# productstore/api/pagination.py
# Parses page/size query parameters for list endpoints.

from typing import Mapping, Tuple

from productstore.database.pagination import validate_page
from productstore.utils.data_conversion import safe_int
from .errors import ValidationError

def parse_pagination(args: Mapping[str, str], default_size: int, max_size: int) -> Tuple[int, int]:
    """
    Reads `page` (default 1) and `size` (default `default_size`) from query args.
    Non-integers, values below 1 and pages past the last addressable row raise
    ValidationError; size is capped at `max_size`.
    """
    raw_page = args.get('page', '1')
    raw_size = args.get('size', str(default_size))

    page_number = safe_int(raw_page)
    page_size = safe_int(raw_size)
    if page_number is None or page_size is None:
        raise ValidationError(f"Invalid pagination parameters: page={raw_page!r}, size={raw_size!r}.")
    if page_number < 1 or page_size < 1:
        raise ValidationError("Pagination parameters 'page' and 'size' must be at least 1.")
    page_size = min(page_size, max_size)
    validate_page(page_number, page_size)
    return page_number, page_size

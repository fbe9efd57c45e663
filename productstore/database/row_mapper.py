# productstore/database/row_mapper.py
# Converts single result rows into bare Product / Order entities.

from numbers import Number
from typing import Any, Callable, List, TypeVar
from sqlalchemy.engine import Result

from productstore.domain import Product, Order
from productstore.utils.data_conversion import safe_int, safe_float
from productstore.api.errors import MappingError

T = TypeVar("T")

def _column(row: Any, name: str) -> Any:
    try:
        return row._mapping[name]
    except KeyError:
        raise MappingError(f"Required column '{name}' is missing from the result row.") from None

def _identifier(row: Any, name: str) -> int:
    value = _column(row, name)
    identifier = safe_int(value)
    if identifier is None:
        raise MappingError(f"Column '{name}' must hold an integer identifier, got {value!r}.")
    return identifier

def map_product_row(row: Any, id_column: str = "id") -> Product:
    """Maps the current row to a Product with an empty `orders` list."""
    identifier = _identifier(row, id_column)

    name = _column(row, "name")
    if not isinstance(name, str) or not name.strip():
        raise MappingError(f"Product {identifier} has an empty or non-text name: {name!r}.")

    raw_price = _column(row, "price")
    price = safe_float(raw_price) if isinstance(raw_price, (Number, str)) else None
    if price is None or price < 0:
        raise MappingError(f"Product {identifier} has a malformed price: {raw_price!r}.")

    return Product(id=identifier, name=name, price=price, orders=[])

def map_order_row(row: Any, id_column: str = "id") -> Order:
    """Maps the current row to an Order with an empty `products` list."""
    identifier = _identifier(row, id_column)

    user_id = None
    if "user_id" in row._mapping.keys():
        raw_user = row._mapping["user_id"]
        if raw_user is not None:
            user_id = safe_int(raw_user)
            if user_id is None:
                raise MappingError(f"Order {identifier} has a malformed user_id: {raw_user!r}.")

    return Order(id=identifier, user_id=user_id, products=[])

def map_rows(result: Result, mapper: Callable[[Any], T]) -> List[T]:
    """Maps every remaining row of `result` with `mapper`."""
    return [mapper(row) for row in result]

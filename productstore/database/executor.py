# productstore/database/executor.py
# Storage primitives used by every repository: parameterized read, write and insert.
#
# Each primitive runs one SQL text statement on the caller's Session. Storage
# failures are logged and re-raised as PersistenceError; anything a consumer
# raises (NotFoundError, MappingError, ...) propagates untouched.

from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar, Union
from sqlalchemy import text
from sqlalchemy.engine import Result
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from productstore.utils.logger import logger
from productstore.api.errors import PersistenceError

T = TypeVar("T")

Params = Union[Mapping[str, Any], List[Dict[str, Any]], None]

def _statement(sql):
    # Accepts raw strings or prepared TextClause objects (e.g. with expanding bindparams)
    return text(sql) if isinstance(sql, str) else sql

def execute_query(db: Session, sql, params: Params, consumer: Callable[[Result], T],
                  error_cls=PersistenceError) -> T:
    """
    Executes a parameterized read and hands the result cursor to `consumer`.

    Args:
        db: The active session.
        sql: SQL text (named `:param` placeholders) or a TextClause.
        params: Bound parameters.
        consumer: Receives the Result and returns the mapped value.
        error_cls: PersistenceError subclass raised when the statement fails.
    """
    logger.debug(f"SQL query: {sql} | params={params}")
    try:
        result = db.execute(_statement(sql), params or {})
    except SQLAlchemyError as e:
        logger.error(f"Query failed: {e}", exc_info=True)
        raise error_cls(f"Query failed: {e}") from e
    return consumer(result)

def execute_update(db: Session, sql, params: Params) -> int:
    """
    Executes a parameterized write. A list of parameter dicts runs as a bulk
    (executemany) statement. Returns the number of affected rows.
    """
    logger.debug(f"SQL update: {sql} | params={params}")
    try:
        result = db.execute(_statement(sql), params or {})
    except SQLAlchemyError as e:
        logger.error(f"Update failed: {e}", exc_info=True)
        raise PersistenceError(f"Update failed: {e}") from e
    return result.rowcount

def execute_insert(db: Session, sql, params: Params, key_consumer: Callable[[Result], T]) -> T:
    """
    Executes a parameterized insert whose SQL ends in `RETURNING <key>` and
    passes the generated-key result to `key_consumer`.
    """
    logger.debug(f"SQL insert: {sql} | params={params}")
    try:
        result = db.execute(_statement(sql), params or {})
    except SQLAlchemyError as e:
        logger.error(f"Insert failed: {e}", exc_info=True)
        raise PersistenceError(f"Insert failed: {e}") from e
    return key_consumer(result)

def single_generated_key(result: Result) -> int:
    """Key consumer returning the one generated id, or raising PersistenceError."""
    key: Optional[Any] = result.scalar()
    if key is None:
        raise PersistenceError("Storage did not return a generated identifier.")
    return int(key)

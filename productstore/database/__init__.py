# productstore/database/__init__.py
# Initializes SQLAlchemy components: Engine, SessionLocal and the schema.
# Uses local imports for logger/errors to prevent circular dependencies during Alembic runs.

import threading
from typing import Optional, Generator
from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

from .tables import metadata

# --- SQLAlchemy Engine and Session Factory Globals ---
_sqla_engine: Optional[Engine] = None
_SessionLocalFactory: Optional[sessionmaker] = None
_engine_lock = threading.Lock()

def _create_engine(database_uri: str, pool_size: int, max_overflow: int) -> Engine:
    if database_uri.startswith("sqlite"):
        # SQLite pools do not take sizing arguments; FK enforcement is per connection
        engine = create_engine(database_uri, echo=False)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, _):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        database_uri,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=3600,
        echo=False
    )

# --- Engine and Session Factory Initialization ---
def init_sqlalchemy(database_uri: str, pool_size: int = 10, max_overflow: int = 20) -> Engine:
    """
    Initializes the SQLAlchemy engine, session factory, and database schema.
    Should be called once during application startup.
    """
    from productstore.utils.logger import logger
    from productstore.api.errors import DatabaseError, ConfigurationError

    global _sqla_engine, _SessionLocalFactory
    with _engine_lock:
        if _sqla_engine and _SessionLocalFactory:
            logger.warning("SQLAlchemy engine and session factory already initialized.")
            return _sqla_engine

        if not database_uri:
            raise ConfigurationError("Database URI is missing in configuration.")

        logger.info("Initializing SQLAlchemy engine and session factory...")
        engine = None
        try:
            # 1. Create the Engine
            engine = _create_engine(database_uri, pool_size, max_overflow)

            # 2. Test Connection
            try:
                with engine.connect():
                    logger.info("Database connection successful.")
            except SQLAlchemyError as conn_err:
                logger.critical(f"Database connection failed: {conn_err}", exc_info=True)
                raise DatabaseError(f"Failed to connect to the database: {conn_err}") from conn_err

            # 3. Create Session Factory (SessionLocal)
            session_factory = sessionmaker(
                autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
            )
            logger.info("SQLAlchemy session factory (SessionLocal) created.")

            # 4. Initialize Schema
            from .schema_manager import SchemaManager
            SchemaManager(engine).initialize_schema()

            _sqla_engine = engine
            _SessionLocalFactory = session_factory
            logger.info("SQLAlchemy initialization complete.")
            return _sqla_engine

        except (DatabaseError, ConfigurationError):
            if engine is not None:
                engine.dispose()
            raise
        except SQLAlchemyError as e:
            logger.critical(f"SQLAlchemy engine/session factory initialization failed: {e}", exc_info=True)
            if engine is not None:
                engine.dispose()
            raise DatabaseError(f"SQLAlchemy initialization failed: {e}") from e

# --- Session Context Manager ---
@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager yielding a database session.
    Commits on success, rolls back on any error and always closes the session.
    """
    from productstore.utils.logger import logger
    from productstore.api.errors import PersistenceError

    if not _SessionLocalFactory:
        raise RuntimeError("Database session factory has not been initialized.")

    db: Session = _SessionLocalFactory()
    try:
        yield db
        db.commit()
        logger.debug("Database session committed successfully.")
    except SQLAlchemyError as sql_ex:
        logger.error(f"Database error occurred in session: {sql_ex}", exc_info=True)
        db.rollback()
        logger.warning("Database session rolled back due to SQLAlchemyError.")
        raise PersistenceError(f"Database operation failed: {sql_ex}") from sql_ex
    except Exception:
        db.rollback()
        logger.debug("Database session rolled back due to exception.")
        raise
    finally:
        db.close()
        logger.debug("Database session closed.")

# --- Engine Shutdown ---
def dispose_sqlalchemy_engine():
    """Closes all connections in the engine's pool. Call during application shutdown."""
    from productstore.utils.logger import logger

    global _sqla_engine, _SessionLocalFactory
    with _engine_lock:
        if _sqla_engine:
            logger.info("Disposing SQLAlchemy engine connection pool...")
            _sqla_engine.dispose()
            _sqla_engine = None
            _SessionLocalFactory = None
            logger.info("SQLAlchemy engine connection pool disposed.")
        else:
            logger.debug("SQLAlchemy engine shutdown called, but engine already disposed or not initialized.")

__all__ = [
    "init_sqlalchemy",
    "get_db_session",
    "dispose_sqlalchemy_engine",
    "metadata",
]

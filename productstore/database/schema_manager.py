# productstore/database/schema_manager.py
# Creates the store's tables on startup.

from sqlalchemy.engine import Engine
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from .tables import metadata
from productstore.utils.logger import logger
from productstore.api.errors import DatabaseError

class SchemaManager:
    def __init__(self, engine: Engine):
        self.engine = engine
        logger.debug("SchemaManager initialized with SQLAlchemy engine.")

    def initialize_schema(self):
        try:
            logger.info("Creating database schema...")
            metadata.create_all(bind=self.engine)
            existing = set(inspect(self.engine).get_table_names())
            missing = [name for name in metadata.tables if name not in existing]
            if missing:
                raise DatabaseError(f"Tables missing after schema creation: {missing}")
            logger.info(f"Tables created/verified: {sorted(metadata.tables)}")
        except SQLAlchemyError as e:
            logger.critical(f"Database schema initialization failed: {e}", exc_info=True)
            raise DatabaseError(f"Schema initialization failed: {e}") from e

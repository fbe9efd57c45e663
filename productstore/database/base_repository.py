# productstore/database/base_repository.py
# Base class for the Product and Order repositories.

from typing import Callable, Dict, Iterable, List, Optional
from sqlalchemy import bindparam, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from productstore.utils.logger import logger
from productstore.api.errors import InconsistentGraphError
from .associations import AssociationSide, JOIN_TABLE
from .executor import execute_query, execute_update
from .graph_builder import EntityArena, link, is_consistent
from .join_table_synchronizer import JoinTableSynchronizer
from .pagination import fetch_page
from .row_mapper import map_rows

ASSOCIATION_STRATEGIES = ('batch', 'per_entity')

class BaseRepository:
    """
    Shared read/write plumbing for an entity that owns one side of the
    Product <-> Order association.

    Subclasses set `side`, `table`, `select_sql`, `row_mapper` and the two
    loader callables. Methods receive the Session from the caller; commit and
    rollback of the surrounding transaction are handled by get_db_session().
    """
    side: AssociationSide
    table: str
    select_sql: str
    row_mapper: Callable
    load_one: Callable           # (db, owner_id, arena) -> list of related
    load_many: Callable          # (db, owner_ids, arena) -> {owner_id: list of related}

    def __init__(self, engine: Engine, association_strategy: str = 'batch',
                 synchronizer: Optional[JoinTableSynchronizer] = None):
        """
        Args:
            engine: The SQLAlchemy Engine instance.
            association_strategy: 'batch' loads the associations of a whole page
                in one query; 'per_entity' issues one query per entity.
            synchronizer: Join-table synchronizer, created when not given.
        """
        if not isinstance(engine, Engine):
             raise TypeError("engine must be an instance of sqlalchemy.engine.Engine")
        if association_strategy not in ASSOCIATION_STRATEGIES:
            raise ValueError(f"association_strategy must be one of {ASSOCIATION_STRATEGIES}")
        self.engine = engine
        self.association_strategy = association_strategy
        self.synchronizer = synchronizer or JoinTableSynchronizer()
        logger.debug(f"{self.__class__.__name__} initialized (strategy={association_strategy}).")

    # --- Reads ---

    def _attach_associations(self, db: Session, owners: List, arena: EntityArena) -> List:
        if not owners:
            return owners
        if self.association_strategy == 'batch':
            grouped = self.load_many(db, [owner.id for owner in owners], arena)
            for owner in owners:
                link(owner, grouped.get(owner.id, []))
        else:
            # One secondary query per owner (N+1)
            for owner in owners:
                link(owner, self.load_one(db, owner.id, arena))
        if not is_consistent(owners):
            logger.error(f"{self.__class__.__name__}: inconsistent graph after loading {len(owners)} entities.")
            raise InconsistentGraphError(
                f"Inconsistent {self.side.owner_type.__name__}/{self.side.related_type.__name__} graph after loading ids {[owner.id for owner in owners]}."
            )
        return owners

    def _load_owners(self, db: Session, sql: str, params: Dict) -> List:
        arena = EntityArena()
        owners = execute_query(db, sql, params, lambda rs: [arena.resolve(self.row_mapper(row)) for row in rs])
        return self._attach_associations(db, owners, arena)

    def find_by_id(self, db: Session, entity_id: int):
        """Returns the entity with its associations loaded, or None."""
        logger.debug(f"Finding {self.side.owner_type.__name__} by ID {entity_id}")
        owners = self._load_owners(db, f"{self.select_sql} WHERE id = :id", {"id": entity_id})
        return owners[0] if owners else None

    def get_all(self, db: Session) -> List:
        logger.debug(f"Retrieving all {self.table}")
        owners = self._load_owners(db, f"{self.select_sql} ORDER BY id", {})
        logger.debug(f"Retrieved {len(owners)} {self.table}.")
        return owners

    def get_page(self, db: Session, page_number: int, page_size: int) -> List:
        """Returns one page of fully associated entities, in identifier order."""
        logger.debug(f"Fetching {self.table} page {page_number} (size {page_size})")
        arena = EntityArena()
        owners = [arena.resolve(owner) for owner in
                  fetch_page(db, self.select_sql, page_number, page_size, self.row_mapper)]
        return self._attach_associations(db, owners, arena)

    def get_associated(self, db: Session, owner_id: int) -> List:
        """Related entities of `owner_id`, each linked back to a bare owner instance."""
        owner = self.find_by_id(db, owner_id)
        return list(self.side.related_of(owner)) if owner is not None else []

    def find_missing_ids(self, db: Session, ids: Iterable[int]) -> List[int]:
        """Returns the ids (in input order, without repeats) that have no row in this table."""
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []
        stmt = text(f"SELECT id FROM {self.table} WHERE id IN :ids").bindparams(bindparam("ids", expanding=True))
        found = execute_query(db, stmt, {"ids": wanted}, lambda rs: {row[0] for row in rs})
        return [entity_id for entity_id in wanted if entity_id not in found]

    def load_by_ids(self, db: Session, ids: Iterable[int]) -> List:
        """Bare entities for `ids`, in input order; unknown ids are skipped."""
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []
        stmt = text(f"{self.select_sql} WHERE id IN :ids").bindparams(bindparam("ids", expanding=True))
        by_id = execute_query(db, stmt, {"ids": wanted},
                              lambda rs: {entity.id: entity for entity in map_rows(rs, self.row_mapper)})
        return [by_id[entity_id] for entity_id in wanted if entity_id in by_id]

    # --- Writes ---

    def delete(self, db: Session, entity_id: int) -> bool:
        """Deletes the entity and its join rows. Returns False when no row matched."""
        logger.debug(f"Deleting {self.side.owner_type.__name__} ID {entity_id}")
        # Explicit delete so cascading does not depend on the backend enforcing FKs
        execute_update(db, f"DELETE FROM {JOIN_TABLE} WHERE {self.side.owner_column} = :id", {"id": entity_id})
        deleted = execute_update(db, f"DELETE FROM {self.table} WHERE id = :id", {"id": entity_id})
        if deleted:
            logger.info(f"{self.side.owner_type.__name__} ID {entity_id} deleted. Commit pending.")
        else:
            logger.warning(f"Attempted to delete {self.side.owner_type.__name__} ID {entity_id}, but it was not found.")
        return bool(deleted)

    def replace_associations(self, db: Session, owner, related: List):
        """Full replace of `owner`'s association set (join rows + in-memory references)."""
        return self.synchronizer.synchronize(db, owner, related)

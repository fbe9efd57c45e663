# productstore/database/join_table_synchronizer.py
# Replaces the full association set of an owner in the join table.

from typing import Iterable, List, Sequence
from sqlalchemy.orm import Session

from productstore.utils.logger import logger
from productstore.api.errors import PersistenceError, ValidationError
from .associations import AssociationSide, JOIN_TABLE, side_for
from .executor import execute_update
from .graph_builder import link, unlink

def _unique_ids(ids: Iterable[int]) -> List[int]:
    # First occurrence wins; the join table's primary key forbids repeats
    return list(dict.fromkeys(ids))

def _unique_entities(entities: Iterable) -> list:
    seen = set()
    unique = []
    for entity in entities:
        if entity.id is None:
            raise ValidationError(f"Cannot associate an unsaved {type(entity).__name__}.")
        if entity.id not in seen:
            seen.add(entity.id)
            unique.append(entity)
    return unique

class JoinTableSynchronizer:
    """
    Full-replace synchronization of join-table rows.

    The delete and the bulk insert run in the caller's session transaction. If
    either statement fails the session is rolled back before PersistenceError
    propagates, so a committed state never has the old links deleted without
    the new ones inserted.
    """

    def synchronize_ids(self, db: Session, side: AssociationSide, owner_id: int, related_ids: Iterable[int]) -> List[int]:
        """
        Deletes every join row of `owner_id` and inserts one row per id in
        `related_ids`. Returns the ids actually written, duplicates collapsed.
        """
        new_ids = _unique_ids(related_ids)
        delete_sql = f"DELETE FROM {JOIN_TABLE} WHERE {side.owner_column} = :owner_id"
        insert_sql = (
            f"INSERT INTO {JOIN_TABLE} ({side.owner_column}, {side.related_column}) "
            f"VALUES (:owner_id, :related_id)"
        )
        try:
            removed = execute_update(db, delete_sql, {"owner_id": owner_id})
            if new_ids:
                execute_update(db, insert_sql, [
                    {"owner_id": owner_id, "related_id": related_id} for related_id in new_ids
                ])
        except PersistenceError:
            logger.error(f"Association replace failed for {side.owner_type.__name__} {owner_id}; rolling back.")
            db.rollback()
            raise

        logger.info(
            f"{side.owner_type.__name__} {owner_id}: replaced {removed} association row(s) with {len(new_ids)}."
        )
        return new_ids

    def synchronize(self, db: Session, owner, related: Sequence):
        """
        Persists `related` as the complete association set of `owner`, then
        rewires in-memory references: entities that dropped out are unlinked,
        every entity of the new set is linked in both directions.
        """
        if owner.id is None:
            raise ValidationError(f"Cannot synchronize associations of an unsaved {type(owner).__name__}.")
        side = side_for(owner)
        new_related = _unique_entities(related)
        for entity in new_related:
            if not isinstance(entity, side.related_type):
                raise ValidationError(
                    f"{type(owner).__name__} can only be associated with {side.related_type.__name__}, got {type(entity).__name__}."
                )

        self.synchronize_ids(db, side, owner.id, [entity.id for entity in new_related])

        # Anything not in the new set by identity goes, including stale same-id copies
        dropped = [
            entity for entity in side.related_of(owner)
            if not any(entity is candidate for candidate in new_related)
        ]
        unlink(owner, dropped)
        link(owner, new_related)
        return owner

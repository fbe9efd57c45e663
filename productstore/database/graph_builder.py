# productstore/database/graph_builder.py
# Builds the bidirectional Product <-> Order object graph from loaded entities.

from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple, Type
from sqlalchemy.engine import Result

from productstore.utils.logger import logger
from .associations import side_for

class EntityArena:
    """
    Identity map for a single load operation.

    Every (type, id) pair resolves to one shared, mutable instance, so the edges
    A->B and B->A always point at the same objects. An arena must not outlive
    the operation that created it.
    """

    def __init__(self):
        self._entities: Dict[Tuple[Type, int], Any] = {}

    def resolve(self, entity):
        """Returns the arena's instance for entity's (type, id), registering entity if new."""
        if entity.id is None:
            raise ValueError(f"Cannot register an unsaved {type(entity).__name__} in an arena.")
        key = (type(entity), entity.id)
        existing = self._entities.get(key)
        if existing is not None:
            return existing
        self._entities[key] = entity
        return entity

    def get(self, entity_type: Type, entity_id: int):
        return self._entities.get((entity_type, entity_id))

    def __contains__(self, entity) -> bool:
        return self._entities.get((type(entity), entity.id)) is entity

    def __len__(self) -> int:
        return len(self._entities)

def _contains_identity(items: Sequence[Any], target: Any) -> bool:
    return any(item is target for item in items)

def link(owner, related: Iterable[Any]):
    """
    Links `owner` with every entity in `related`, in both directions.

    Entries already present (by identity) are not appended again, so calling it
    twice for the same owner/related pair is a no-op. Two distinct instances
    carrying the same id are NOT merged; use an EntityArena for that.
    """
    side = side_for(owner)
    owned = side.related_of(owner)
    for entity in related:
        if not _contains_identity(owned, entity):
            owned.append(entity)
        back_refs = side.owners_of(entity)
        if not _contains_identity(back_refs, owner):
            back_refs.append(owner)
    return owner

def unlink(owner, related: Iterable[Any]):
    """Removes the owner/related pairs in both directions (identity based)."""
    side = side_for(owner)
    dropped = list(related)
    owned = side.related_of(owner)
    owned[:] = [entity for entity in owned if not _contains_identity(dropped, entity)]
    for entity in dropped:
        back_refs = side.owners_of(entity)
        back_refs[:] = [item for item in back_refs if item is not owner]
    return owner

def build_from_joined_rows(result: Result,
                           owner_mapper: Callable[[Any], Any],
                           related_mapper: Callable[[Any], Any],
                           related_id_column: str) -> Optional[Any]:
    """
    Maps a LEFT JOIN result (one row per relation) into one linked owner.

    The owner is mapped from the first row only and shared by every related
    entity. Rows whose related id is NULL (owner without relations) add nothing.
    Returns None when the result has no rows.
    """
    owner = None
    related = []
    for row in result:
        if owner is None:
            owner = owner_mapper(row)
        if row._mapping.get(related_id_column) is None:
            continue
        related.append(related_mapper(row))

    if owner is None:
        return None
    link(owner, related)
    logger.debug(f"Built {type(owner).__name__} {owner.id} from joined rows with {len(related)} relation(s).")
    return owner

def is_consistent(entities: Iterable[Any]) -> bool:
    """
    Checks `o in p.orders <=> p in o.products` (by identity) over every entity
    reachable in one hop from `entities`.
    """
    roots = list(entities)
    reachable = list(roots)
    for entity in roots:
        reachable.extend(side_for(entity).related_of(entity))

    for entity in reachable:
        side = side_for(entity)
        for related in side.related_of(entity):
            if not _contains_identity(side.owners_of(related), entity):
                return False
    return True

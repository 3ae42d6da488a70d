"""MemoryAdapter - dict-backed adapter for tests and prototyping."""

from __future__ import annotations

import copy
import logging
import re
import uuid
from typing import TYPE_CHECKING, Any

from ...paths import MISSING, get_path, set_path, unset_path
from ...primitives.exceptions import InvalidParameterError, PersistenceError
from .matching import QueryMatcher

if TYPE_CHECKING:
    from ...descriptor import FilterDescriptor
    from .matching import MemoryOperatorRegistry

logger = logging.getLogger("datakit.memory")

NATIVE_ID = "_id"
_UPDATE_OPERATORS = ("$set", "$unset", "$inc")


def _sort_key(value: Any) -> tuple[int, Any]:
    # Missing/None sort before everything else, like MongoDB.
    if value is MISSING or value is None:
        return (0, 0)
    return (1, value)


class MemoryAdapter:
    """In-memory implementation of ``IAdapter``.

    Documents are kept in insertion order in a plain dict keyed by ``_id``.
    Every value is deep-copied on the way in and out so callers can never
    alias stored state.
    """

    def __init__(self, registry: MemoryOperatorRegistry | None = None) -> None:
        self._store: dict[Any, dict[str, Any]] = {}
        self._matcher = QueryMatcher(registry)
        self.connected = False

    # ── Lifecycle ────────────────────────────────────────────────

    async def connect(self) -> None:
        self.connected = True
        logger.debug("Memory adapter connected")

    async def disconnect(self) -> None:
        self.connected = False
        logger.debug("Memory adapter disconnected")

    # ── Reads ────────────────────────────────────────────────────

    def _select(self, descriptor: FilterDescriptor | None) -> list[dict[str, Any]]:
        docs = list(self._store.values())
        if descriptor is None:
            return docs
        if descriptor.query is not None:
            docs = [d for d in docs if self._matcher.matches(d, descriptor.query)]
        if descriptor.search:
            docs = [
                d
                for d in docs
                if self._matches_search(d, descriptor.search, descriptor.search_fields)
            ]
        return docs

    @staticmethod
    def _matches_search(
        doc: dict[str, Any], search: str, search_fields: list[str] | None
    ) -> bool:
        pattern = re.compile(re.escape(search), re.IGNORECASE)
        if search_fields:
            values = [get_path(doc, f) for f in search_fields]
        else:
            values = list(doc.values())
        return any(
            isinstance(v, str | int | float) and pattern.search(str(v)) is not None
            for v in values
            if v is not MISSING and not isinstance(v, bool)
        )

    @staticmethod
    def _sorted(docs: list[dict[str, Any]], sort: list[str]) -> list[dict[str, Any]]:
        # Stable sorts applied from the least to the most significant key.
        for entry in reversed(sort):
            descending = entry.startswith("-")
            path = entry[1:] if descending else entry
            try:
                docs = sorted(
                    docs,
                    key=lambda d, p=path: _sort_key(get_path(d, p)),  # type: ignore[misc]
                    reverse=descending,
                )
            except TypeError as exc:
                raise InvalidParameterError(
                    f"Cannot sort by {path!r}: values are not comparable",
                    param="sort",
                ) from exc
        return docs

    async def find(self, descriptor: FilterDescriptor | None = None) -> list[Any]:
        docs = self._select(descriptor)
        if descriptor is not None:
            if descriptor.sort:
                docs = self._sorted(docs, descriptor.sort)
            if descriptor.offset and descriptor.offset > 0:
                docs = docs[descriptor.offset :]
            if descriptor.limit and descriptor.limit > 0:
                docs = docs[: descriptor.limit]
        return copy.deepcopy(docs)

    async def find_one(self, query: Any) -> Any | None:
        for doc in self._store.values():
            if self._matcher.matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def find_by_id(self, entity_id: Any) -> Any | None:
        doc = self._store.get(entity_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def find_by_ids(self, entity_ids: list[Any]) -> list[Any]:
        wanted = set(entity_ids)
        return [
            copy.deepcopy(doc) for key, doc in self._store.items() if key in wanted
        ]

    async def count(self, descriptor: FilterDescriptor | None = None) -> int:
        return len(self._select(descriptor))

    # ── Writes ───────────────────────────────────────────────────

    async def insert(self, entity: dict[str, Any]) -> Any:
        doc = copy.deepcopy(dict(entity))
        if doc.get(NATIVE_ID) is None:
            doc[NATIVE_ID] = uuid.uuid4().hex
        if doc[NATIVE_ID] in self._store:
            raise PersistenceError(f"Duplicate key {NATIVE_ID}={doc[NATIVE_ID]!r}")
        self._store[doc[NATIVE_ID]] = doc
        return copy.deepcopy(doc)

    async def insert_many(self, entities: list[dict[str, Any]]) -> list[Any]:
        return [await self.insert(entity) for entity in entities]

    def _apply(self, doc: dict[str, Any], patch: dict[str, Any]) -> None:
        if not patch or any(op not in _UPDATE_OPERATORS for op in patch):
            raise InvalidParameterError(
                f"Update patches must only use {', '.join(_UPDATE_OPERATORS)}",
                param="patch",
            )
        for path, value in (patch.get("$set") or {}).items():
            if path == NATIVE_ID and value != doc[NATIVE_ID]:
                raise PersistenceError(f"{NATIVE_ID} is immutable")
            set_path(doc, path, copy.deepcopy(value))
        for path in patch.get("$unset") or {}:
            if path != NATIVE_ID:
                unset_path(doc, path)
        for path, amount in (patch.get("$inc") or {}).items():
            current = get_path(doc, path, 0)
            if not isinstance(current, int | float) or isinstance(current, bool):
                raise InvalidParameterError(
                    f"Cannot increment non-numeric field {path!r}", param="patch"
                )
            set_path(doc, path, current + amount)

    async def update_by_id(self, entity_id: Any, patch: dict[str, Any]) -> Any | None:
        doc = self._store.get(entity_id)
        if doc is None:
            return None
        updated = copy.deepcopy(doc)
        self._apply(updated, patch)
        self._store[entity_id] = updated
        return copy.deepcopy(updated)

    async def update_many(self, query: Any, patch: dict[str, Any]) -> int:
        keys = [k for k, d in self._store.items() if self._matcher.matches(d, query)]
        for key in keys:
            await self.update_by_id(key, patch)
        return len(keys)

    async def remove_by_id(self, entity_id: Any) -> Any | None:
        return self._store.pop(entity_id, None)

    async def remove_many(self, query: Any) -> int:
        keys = [k for k, d in self._store.items() if self._matcher.matches(d, query)]
        for key in keys:
            del self._store[key]
        return len(keys)

    async def clear(self) -> int:
        count = len(self._store)
        self._store.clear()
        return count

    # ── Conversions ──────────────────────────────────────────────

    def entity_to_object(self, entity: Any) -> dict[str, Any]:
        return copy.deepcopy(dict(entity))

    def before_save_transform_id(
        self, entity: dict[str, Any], id_field: str
    ) -> dict[str, Any]:
        new_entity = copy.deepcopy(entity)
        if id_field != NATIVE_ID and entity.get(id_field) is not None:
            new_entity[NATIVE_ID] = new_entity.pop(id_field)
        return new_entity

    def after_retrieve_transform_id(
        self, entity: dict[str, Any], id_field: str
    ) -> dict[str, Any]:
        if id_field != NATIVE_ID and NATIVE_ID in entity:
            entity[id_field] = entity.pop(NATIVE_ID)
        return entity

    def __len__(self) -> int:
        return len(self._store)

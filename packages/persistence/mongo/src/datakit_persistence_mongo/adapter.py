"""MongoAdapter - IAdapter over one Motor collection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from bson import ObjectId
from pymongo import ReturnDocument

from datakit_core.primitives.exceptions import AdapterNotConnectedError

from .query_builder import MongoQueryBuilder
from .serialization import from_bson, object_id_to_str, to_bson, to_object_id

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection

    from datakit_core.descriptor import FilterDescriptor

    from .connection import MongoConnectionManager

logger = logging.getLogger("datakit.mongo")

NATIVE_ID = "_id"


class MongoAdapter:
    """Store documents of one collection in MongoDB.

    Ids are ``ObjectId`` natively. Hex strings coming from clients are
    converted before they reach the server; other ids (ints, custom
    strings) are stored and looked up as they are. ``entity_to_object``
    renders ``_id`` back as a hex string.
    """

    def __init__(
        self,
        connection: MongoConnectionManager,
        collection: str,
        *,
        database: str | None = None,
        query_builder: MongoQueryBuilder | None = None,
    ) -> None:
        self._connection = connection
        self._collection_name = collection
        self._database = database
        self._query_builder = query_builder or MongoQueryBuilder()
        self._collection: AsyncIOMotorCollection[Any] | None = None

    @property
    def collection(self) -> AsyncIOMotorCollection[Any]:
        if self._collection is None:
            raise AdapterNotConnectedError(
                f"Mongo adapter for {self._collection_name!r} is not connected"
            )
        return self._collection

    # ── Lifecycle ────────────────────────────────────────────────

    async def connect(self) -> None:
        await self._connection.connect()
        db = self._connection.get_database(self._database)
        self._collection = db.get_collection(self._collection_name)
        logger.debug("Mongo adapter connected to %s", self._collection_name)

    async def disconnect(self) -> None:
        self._collection = None
        self._connection.close()

    # ── Reads ────────────────────────────────────────────────────

    async def find(self, descriptor: FilterDescriptor | None = None) -> list[Any]:
        builder = self._query_builder
        kwargs: dict[str, Any] = {}
        sort = builder.build_sort(descriptor)
        if sort:
            kwargs["sort"] = sort
        if descriptor is not None:
            if descriptor.offset and descriptor.offset > 0:
                kwargs["skip"] = descriptor.offset
            if descriptor.limit and descriptor.limit > 0:
                kwargs["limit"] = descriptor.limit
        cursor = self.collection.find(
            builder.build_filter(descriptor),
            builder.build_projection(descriptor),
            **kwargs,
        )
        return [doc async for doc in cursor]

    async def find_one(self, query: Any) -> Any | None:
        return await self.collection.find_one(to_bson(query))

    async def find_by_id(self, entity_id: Any) -> Any | None:
        return await self.collection.find_one({NATIVE_ID: to_object_id(entity_id)})

    async def find_by_ids(self, entity_ids: list[Any]) -> list[Any]:
        ids = [to_object_id(i) for i in entity_ids]
        cursor = self.collection.find({NATIVE_ID: {"$in": ids}})
        return [doc async for doc in cursor]

    async def count(self, descriptor: FilterDescriptor | None = None) -> int:
        return int(
            await self.collection.count_documents(
                self._query_builder.build_filter(descriptor)
            )
        )

    # ── Writes ───────────────────────────────────────────────────

    @staticmethod
    def _prepare(entity: dict[str, Any]) -> dict[str, Any]:
        doc: dict[str, Any] = to_bson(dict(entity))
        if doc.get(NATIVE_ID) is None:
            doc[NATIVE_ID] = ObjectId()
        else:
            doc[NATIVE_ID] = to_object_id(doc[NATIVE_ID])
        return doc

    async def insert(self, entity: dict[str, Any]) -> Any:
        doc = self._prepare(entity)
        await self.collection.insert_one(doc)
        return doc

    async def insert_many(self, entities: list[dict[str, Any]]) -> list[Any]:
        docs = [self._prepare(e) for e in entities]
        if docs:
            await self.collection.insert_many(docs)
        return docs

    async def update_by_id(self, entity_id: Any, patch: dict[str, Any]) -> Any | None:
        """Apply *patch* and return the document after the change."""
        update = {op: to_bson(values) for op, values in patch.items() if values}
        if not update:
            return await self.find_by_id(entity_id)
        return await self.collection.find_one_and_update(
            {NATIVE_ID: to_object_id(entity_id)},
            update,
            return_document=ReturnDocument.AFTER,
        )

    async def update_many(self, query: Any, patch: dict[str, Any]) -> int:
        result = await self.collection.update_many(to_bson(query), to_bson(patch))
        return int(result.modified_count)

    async def remove_by_id(self, entity_id: Any) -> Any | None:
        """Delete and return the document as it was before removal."""
        return await self.collection.find_one_and_delete(
            {NATIVE_ID: to_object_id(entity_id)}
        )

    async def remove_many(self, query: Any) -> int:
        result = await self.collection.delete_many(to_bson(query))
        return int(result.deleted_count)

    async def clear(self) -> int:
        result = await self.collection.delete_many({})
        return int(result.deleted_count)

    # ── Conversion ───────────────────────────────────────────────

    def entity_to_object(self, entity: Any) -> dict[str, Any]:
        doc: dict[str, Any] = from_bson(dict(entity))
        if NATIVE_ID in doc:
            doc[NATIVE_ID] = object_id_to_str(doc[NATIVE_ID])
        return doc

    def before_save_transform_id(
        self, entity: dict[str, Any], id_field: str
    ) -> dict[str, Any]:
        doc = dict(entity)
        if id_field != NATIVE_ID and id_field in doc:
            doc[NATIVE_ID] = doc.pop(id_field)
        return doc

    def after_retrieve_transform_id(
        self, entity: dict[str, Any], id_field: str
    ) -> dict[str, Any]:
        if id_field != NATIVE_ID and NATIVE_ID in entity:
            entity[id_field] = entity.pop(NATIVE_ID)
        return entity

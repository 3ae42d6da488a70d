"""Tests for MemoryAdapter."""

from __future__ import annotations

import pytest

from datakit_core.adapters.memory import MemoryAdapter
from datakit_core.descriptor import FilterDescriptor
from datakit_core.ports import IAdapter
from datakit_core.primitives.exceptions import InvalidParameterError, PersistenceError

POSTS = [
    {"_id": "p1", "title": "Hello", "content": "Post content", "votes": 2, "author": 3},
    {"_id": "p2", "title": "Second post", "content": "Lorem ipsum", "votes": 0, "author": 5},
    {"_id": "p3", "title": "Last", "content": "Hello again", "votes": 5, "author": 3},
]


@pytest.mark.asyncio
class TestMemoryAdapter:
    """Test MemoryAdapter CRUD, query and id conversions."""

    @pytest.fixture
    async def adapter(self) -> MemoryAdapter:
        adapter = MemoryAdapter()
        await adapter.connect()
        await adapter.insert_many(POSTS)
        return adapter

    async def test_satisfies_protocol(self, adapter: MemoryAdapter) -> None:
        assert isinstance(adapter, IAdapter)
        assert adapter.connected

    async def test_insert_generates_id(self) -> None:
        adapter = MemoryAdapter()
        saved = await adapter.insert({"title": "x"})
        assert isinstance(saved["_id"], str)
        assert len(saved["_id"]) == 32

    async def test_insert_duplicate_raises(self, adapter: MemoryAdapter) -> None:
        with pytest.raises(PersistenceError):
            await adapter.insert({"_id": "p1"})

    async def test_find_all_in_insertion_order(self, adapter: MemoryAdapter) -> None:
        docs = await adapter.find()
        assert [d["_id"] for d in docs] == ["p1", "p2", "p3"]

    async def test_find_returns_copies(self, adapter: MemoryAdapter) -> None:
        docs = await adapter.find()
        docs[0]["title"] = "changed"
        assert (await adapter.find_by_id("p1"))["title"] == "Hello"

    async def test_query_operators(self, adapter: MemoryAdapter) -> None:
        docs = await adapter.find(FilterDescriptor(query={"votes": {"$gt": 1}}))
        assert [d["_id"] for d in docs] == ["p1", "p3"]

        docs = await adapter.find(
            FilterDescriptor(query={"$or": [{"author": 5}, {"votes": 5}]})
        )
        assert [d["_id"] for d in docs] == ["p2", "p3"]

        docs = await adapter.find(FilterDescriptor(query={"_id": {"$nin": ["p1"]}}))
        assert [d["_id"] for d in docs] == ["p2", "p3"]

    async def test_unknown_operator_raises(self, adapter: MemoryAdapter) -> None:
        with pytest.raises(InvalidParameterError):
            await adapter.find(FilterDescriptor(query={"votes": {"$near": 1}}))

    async def test_search_is_case_insensitive(self, adapter: MemoryAdapter) -> None:
        docs = await adapter.find(FilterDescriptor(search="hello"))
        assert [d["_id"] for d in docs] == ["p1", "p3"]

        docs = await adapter.find(
            FilterDescriptor(search="hello", search_fields=["title"])
        )
        assert [d["_id"] for d in docs] == ["p1"]

    async def test_sort_limit_offset(self, adapter: MemoryAdapter) -> None:
        docs = await adapter.find(FilterDescriptor(sort=["-votes"]))
        assert [d["_id"] for d in docs] == ["p3", "p1", "p2"]

        docs = await adapter.find(
            FilterDescriptor(sort=["author", "-votes"], limit=2, offset=1)
        )
        assert [d["_id"] for d in docs] == ["p1", "p2"]

    async def test_count_ignores_pagination(self, adapter: MemoryAdapter) -> None:
        descriptor = FilterDescriptor(query={"author": 3}, limit=1)
        assert await adapter.count(descriptor) == 2
        assert await adapter.count() == 3

    async def test_find_by_ids_storage_order(self, adapter: MemoryAdapter) -> None:
        docs = await adapter.find_by_ids(["p3", "missing", "p1"])
        assert [d["_id"] for d in docs] == ["p1", "p3"]

    async def test_find_one(self, adapter: MemoryAdapter) -> None:
        doc = await adapter.find_one({"author": 3})
        assert doc is not None
        assert doc["_id"] == "p1"
        assert await adapter.find_one({"author": 99}) is None

    async def test_update_by_id(self, adapter: MemoryAdapter) -> None:
        doc = await adapter.update_by_id(
            "p1", {"$set": {"title": "Changed", "meta.tags": ["a"]}, "$inc": {"votes": 1}}
        )
        assert doc["title"] == "Changed"
        assert doc["meta"] == {"tags": ["a"]}
        assert doc["votes"] == 3
        assert await adapter.update_by_id("missing", {"$set": {"a": 1}}) is None

    async def test_update_requires_operators(self, adapter: MemoryAdapter) -> None:
        with pytest.raises(InvalidParameterError):
            await adapter.update_by_id("p1", {"title": "plain"})

    async def test_update_many_and_remove_many(self, adapter: MemoryAdapter) -> None:
        assert await adapter.update_many({"author": 3}, {"$unset": {"content": 1}}) == 2
        assert "content" not in (await adapter.find_by_id("p3"))

        assert await adapter.remove_many({"author": 3}) == 2
        assert len(adapter) == 1

    async def test_remove_by_id_returns_removed(self, adapter: MemoryAdapter) -> None:
        removed = await adapter.remove_by_id("p2")
        assert removed["title"] == "Second post"
        assert await adapter.remove_by_id("p2") is None

    async def test_clear(self, adapter: MemoryAdapter) -> None:
        assert await adapter.clear() == 3
        assert await adapter.count() == 0

    async def test_id_transforms_round_trip(self, adapter: MemoryAdapter) -> None:
        entity = {"id": "x1", "title": "t"}
        saved = adapter.before_save_transform_id(entity, "id")
        assert saved == {"_id": "x1", "title": "t"}
        assert entity == {"id": "x1", "title": "t"}

        stored = await adapter.insert(saved)
        back = adapter.after_retrieve_transform_id(
            adapter.entity_to_object(stored), "id"
        )
        assert back == entity

    async def test_id_transforms_noop_for_native_field(
        self, adapter: MemoryAdapter
    ) -> None:
        entity = {"_id": "x1"}
        assert adapter.before_save_transform_id(entity, "_id") == entity
        assert adapter.after_retrieve_transform_id({"_id": "x1"}, "_id") == entity

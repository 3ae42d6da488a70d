"""Test configuration for the MongoDB adapter package."""

from __future__ import annotations

import pytest
from mongomock_motor import AsyncMongoMockClient

from datakit_persistence_mongo import MongoAdapter, MongoConnectionManager


@pytest.fixture
def mongo_connection() -> MongoConnectionManager:
    """Connection manager backed by mongomock instead of a real server."""
    connection = MongoConnectionManager.__new__(MongoConnectionManager)
    connection._client = AsyncMongoMockClient(default_database_name="test_db")
    connection._database = "test_db"
    connection._url = "mongodb://mock:27017"

    async def _mock_connect():
        return connection._client

    connection.connect = _mock_connect  # type: ignore[method-assign]
    return connection


@pytest.fixture
async def adapter(mongo_connection: MongoConnectionManager) -> MongoAdapter:
    adapter = MongoAdapter(mongo_connection, "people")
    await adapter.connect()
    return adapter

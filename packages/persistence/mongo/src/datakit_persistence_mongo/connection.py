"""MongoConnectionManager - Motor client lifecycle and health check."""

from __future__ import annotations

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .exceptions import MongoConnectionError

logger = logging.getLogger("datakit.mongo")


class MongoConnectionManager:
    """Own one Motor client shared by every adapter of a process.

    ``database`` is the default database handed to adapters that do not
    name their own. With ``verify=True`` :meth:`connect` pings the server
    so an unreachable cluster fails at connect time instead of on the
    first query.
    """

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        *,
        database: str | None = None,
        verify: bool = True,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        **kwargs: Any,
    ) -> None:
        self._url = url
        self._database = database
        self._verify = verify
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._connect_timeout_ms = connect_timeout_ms
        self._kwargs = kwargs
        self._client: AsyncIOMotorClient[Any] | None = None

    async def connect(self) -> AsyncIOMotorClient[Any]:
        """Create and cache the Motor client. Idempotent."""
        if self._client is not None:
            return self._client
        try:
            client: AsyncIOMotorClient[Any] = AsyncIOMotorClient(
                self._url,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
                connectTimeoutMS=self._connect_timeout_ms,
                **self._kwargs,
            )
            if self._verify:
                await client.admin.command("ping")
        except Exception as e:
            raise MongoConnectionError(str(e)) from e
        self._client = client
        logger.debug("Connected to MongoDB")
        return client

    @property
    def client(self) -> AsyncIOMotorClient[Any]:
        """Return the Motor client; raises if not connected."""
        if self._client is None:
            raise MongoConnectionError("Not connected; call connect() first")
        return self._client

    def get_database(self, name: str | None = None) -> AsyncIOMotorDatabase[Any]:
        database_name = name or self._database
        if not database_name:
            raise MongoConnectionError(
                "Database name must be set on the adapter or the connection"
            )
        return self.client.get_database(database_name)

    def close(self) -> None:
        """Close the client (synchronous; Motor client.close() is sync)."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.debug("Disconnected from MongoDB")

    async def health_check(self) -> bool:
        """Ping the server; return True if reachable."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except Exception:  # noqa: BLE001
            return False

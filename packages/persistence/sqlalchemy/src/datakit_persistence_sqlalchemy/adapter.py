"""SQLAlchemyAdapter - IAdapter over one SQLAlchemy Core table."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from datakit_core.primitives.exceptions import AdapterNotConnectedError

from .compiler import QueryCompiler
from .exceptions import SQLAlchemyPersistenceError

if TYPE_CHECKING:
    from sqlalchemy import Table
    from sqlalchemy.ext.asyncio import AsyncConnection

    from datakit_core.descriptor import FilterDescriptor

    from .operators import SQLAlchemyOperatorRegistry

logger = logging.getLogger("datakit.sqlalchemy")


class SQLAlchemyAdapter:
    """Store rows of one table through an ``AsyncEngine``.

    Accepts an engine or a database URL; an engine created from a URL is
    owned by the adapter and disposed on :meth:`disconnect`. With
    ``create_table=True`` the table is created on connect when missing.

    Entities are ``RowMapping`` objects; ``entity_to_object`` turns them
    into plain dicts. ``id_column`` is the native primary key name.
    """

    def __init__(
        self,
        engine_or_url: AsyncEngine | str,
        table: Table,
        id_column: str = "id",
        *,
        create_table: bool = True,
        registry: SQLAlchemyOperatorRegistry | None = None,
    ) -> None:
        self._engine_or_url = engine_or_url
        self._engine: AsyncEngine | None = None
        self._table = table
        self._create_table = create_table
        self._compiler = QueryCompiler(table, registry)
        self.id_column = id_column
        self._id = self._compiler.column(id_column)

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise AdapterNotConnectedError(
                f"SQLAlchemy adapter for {self._table.name!r} is not connected"
            )
        return self._engine

    @property
    def compiler(self) -> QueryCompiler:
        return self._compiler

    # ── Lifecycle ────────────────────────────────────────────────

    async def connect(self) -> None:
        engine = self._engine_or_url
        if isinstance(engine, str):
            engine = create_async_engine(engine)
        if self._create_table:
            async with engine.begin() as conn:
                await conn.run_sync(self._table.create, checkfirst=True)
        self._engine = engine
        logger.debug("SQLAlchemy adapter connected to table %s", self._table.name)

    async def disconnect(self) -> None:
        engine, self._engine = self._engine, None
        if engine is not None and isinstance(self._engine_or_url, str):
            await engine.dispose()

    # ── Reads ────────────────────────────────────────────────────

    async def _all(self, stmt: Any) -> list[Any]:
        async with self.engine.connect() as conn:
            result = await conn.execute(stmt)
            return list(result.mappings().all())

    async def find(self, descriptor: FilterDescriptor | None = None) -> list[Any]:
        stmt = self._compiler.apply(select(self._table), descriptor)
        return await self._all(stmt)

    async def find_one(self, query: Any) -> Any | None:
        stmt = select(self._table).where(self._compiler.where(query)).limit(1)
        rows = await self._all(stmt)
        return rows[0] if rows else None

    async def find_by_id(self, entity_id: Any) -> Any | None:
        rows = await self._all(select(self._table).where(self._id == entity_id))
        return rows[0] if rows else None

    async def find_by_ids(self, entity_ids: list[Any]) -> list[Any]:
        if not entity_ids:
            return []
        return await self._all(select(self._table).where(self._id.in_(entity_ids)))

    async def count(self, descriptor: FilterDescriptor | None = None) -> int:
        stmt = self._compiler.filter(
            select(func.count()).select_from(self._table), descriptor
        )
        async with self.engine.connect() as conn:
            return int((await conn.execute(stmt)).scalar_one())

    # ── Writes ───────────────────────────────────────────────────

    def _row_values(self, entity: Mapping[str, Any]) -> dict[str, Any]:
        values = dict(entity)
        unknown = [k for k in values if k not in self._table.c]
        if unknown:
            raise SQLAlchemyPersistenceError(
                f"Table {self._table.name!r} has no column(s) {', '.join(unknown)}"
            )
        if values.get(self.id_column) is None:
            values.pop(self.id_column, None)
        return values

    async def _insert(self, conn: AsyncConnection, entity: Mapping[str, Any]) -> Any:
        stmt = insert(self._table).values(self._row_values(entity))
        result = await conn.execute(stmt)
        pk = result.inserted_primary_key
        entity_id = pk[0] if pk else entity.get(self.id_column)
        row = (
            await conn.execute(select(self._table).where(self._id == entity_id))
        ).mappings().first()
        return row

    async def insert(self, entity: dict[str, Any]) -> Any:
        async with self.engine.begin() as conn:
            return await self._insert(conn, entity)

    async def insert_many(self, entities: list[dict[str, Any]]) -> list[Any]:
        async with self.engine.begin() as conn:
            return [await self._insert(conn, entity) for entity in entities]

    async def update_by_id(self, entity_id: Any, patch: dict[str, Any]) -> Any | None:
        """Apply *patch* and return the row after the change."""
        values = self._compiler.values(patch)
        async with self.engine.begin() as conn:
            if values:
                stmt = update(self._table).where(self._id == entity_id).values(values)
                await conn.execute(stmt)
            return (
                await conn.execute(select(self._table).where(self._id == entity_id))
            ).mappings().first()

    async def update_many(self, query: Any, patch: dict[str, Any]) -> int:
        values = self._compiler.values(patch)
        if not values:
            return 0
        stmt = update(self._table).where(self._compiler.where(query)).values(values)
        async with self.engine.begin() as conn:
            return int((await conn.execute(stmt)).rowcount)

    async def remove_by_id(self, entity_id: Any) -> Any | None:
        """Delete and return the row as it was before removal."""
        async with self.engine.begin() as conn:
            row = (
                await conn.execute(select(self._table).where(self._id == entity_id))
            ).mappings().first()
            if row is not None:
                await conn.execute(delete(self._table).where(self._id == entity_id))
            return row

    async def remove_many(self, query: Any) -> int:
        stmt = delete(self._table).where(self._compiler.where(query))
        async with self.engine.begin() as conn:
            return int((await conn.execute(stmt)).rowcount)

    async def clear(self) -> int:
        async with self.engine.begin() as conn:
            return int((await conn.execute(delete(self._table))).rowcount)

    # ── Conversion ───────────────────────────────────────────────

    def entity_to_object(self, entity: Any) -> dict[str, Any]:
        if hasattr(entity, "_mapping"):
            return dict(entity._mapping)
        return dict(entity)

    def before_save_transform_id(
        self, entity: dict[str, Any], id_field: str
    ) -> dict[str, Any]:
        doc = dict(entity)
        if id_field != self.id_column and id_field in doc:
            doc[self.id_column] = doc.pop(id_field)
        return doc

    def after_retrieve_transform_id(
        self, entity: dict[str, Any], id_field: str
    ) -> dict[str, Any]:
        if id_field != self.id_column and self.id_column in entity:
            entity[id_field] = entity.pop(self.id_column)
        return entity

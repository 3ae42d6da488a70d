"""Shared fixtures: an in-memory aiosqlite engine and a people table."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy import Column, Integer, MetaData, Numeric, String, Table
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from datakit_persistence_sqlalchemy import SQLAlchemyAdapter


@pytest.fixture
def people() -> Table:
    return Table(
        "people",
        MetaData(),
        Column("id", Integer, primary_key=True),
        Column("name", String(50)),
        Column("email", String(100)),
        Column("age", Integer),
        Column("score", Numeric(6, 2)),
    )


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    yield eng
    await eng.dispose()


@pytest.fixture
async def adapter(engine: AsyncEngine, people: Table) -> SQLAlchemyAdapter:
    adapter = SQLAlchemyAdapter(engine, people)
    await adapter.connect()
    return adapter

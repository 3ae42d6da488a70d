"""Tests for QueryCompiler (SQL rendering only, no database)."""

from __future__ import annotations

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, select

from datakit_core.descriptor import FilterDescriptor
from datakit_persistence_sqlalchemy import QueryCompilationError, QueryCompiler

users = Table(
    "users",
    MetaData(),
    Column("id", Integer, primary_key=True),
    Column("name", String),
    Column("status", String),
    Column("age", Integer),
)


def sql(expr: object) -> str:
    return str(expr.compile())  # type: ignore[attr-defined]


@pytest.fixture
def compiler() -> QueryCompiler:
    return QueryCompiler(users)


class TestWhere:
    def test_equality(self, compiler: QueryCompiler) -> None:
        assert sql(compiler.where({"status": "active"})) == "users.status = :status_1"

    def test_null_equality(self, compiler: QueryCompiler) -> None:
        assert sql(compiler.where({"status": None})) == "users.status IS NULL"

    def test_operators_are_anded(self, compiler: QueryCompiler) -> None:
        compiled = sql(compiler.where({"age": {"$gte": 18, "$lt": 65}}))
        assert "users.age >= :age_1" in compiled
        assert "users.age < :age_2" in compiled
        assert " AND " in compiled

    def test_in(self, compiler: QueryCompiler) -> None:
        assert "users.id IN" in sql(compiler.where({"id": {"$in": [1, 2]}}))

    def test_in_requires_array(self, compiler: QueryCompiler) -> None:
        with pytest.raises(QueryCompilationError):
            compiler.where({"id": {"$in": 1}})

    def test_or(self, compiler: QueryCompiler) -> None:
        compiled = sql(compiler.where({"$or": [{"name": "a"}, {"name": "b"}]}))
        assert "users.name = :name_1 OR users.name = :name_2" in compiled

    def test_unknown_column(self, compiler: QueryCompiler) -> None:
        with pytest.raises(QueryCompilationError, match="no column 'nope'"):
            compiler.where({"nope": 1})

    def test_unknown_operator(self, compiler: QueryCompiler) -> None:
        with pytest.raises(QueryCompilationError):
            compiler.where({"age": {"$near": 1}})
        with pytest.raises(QueryCompilationError):
            compiler.where({"$where": "1"})

    def test_query_must_be_mapping(self, compiler: QueryCompiler) -> None:
        with pytest.raises(QueryCompilationError):
            compiler.where([{"age": 1}])


class TestDescriptor:
    def test_order_by(self, compiler: QueryCompiler) -> None:
        stmt = compiler.apply(select(users), FilterDescriptor(sort=["-age", "name"]))
        assert "ORDER BY users.age DESC, users.name ASC" in sql(stmt)

    def test_window(self, compiler: QueryCompiler) -> None:
        stmt = compiler.apply(select(users), FilterDescriptor(limit=10, offset=20))
        compiled = sql(stmt)
        assert "LIMIT" in compiled
        assert "OFFSET" in compiled

    def test_search_defaults_to_text_columns(self, compiler: QueryCompiler) -> None:
        compiled = sql(compiler.search("wal"))
        assert "users.name" in compiled
        assert "users.status" in compiled
        assert "users.age" not in compiled


class TestValues:
    def test_set_unset_inc(self, compiler: QueryCompiler) -> None:
        values = compiler.values(
            {"$set": {"name": "x"}, "$unset": {"status": ""}, "$inc": {"age": 1}}
        )
        assert values["name"] == "x"
        assert values["status"] is None
        assert sql(values["age"]) == "users.age + :age_1"

    def test_unsupported_operator(self, compiler: QueryCompiler) -> None:
        with pytest.raises(QueryCompilationError):
            compiler.values({"$push": {"name": "x"}})

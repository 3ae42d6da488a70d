"""
Compile Mongo-style query mappings and descriptors into SQLAlchemy Core.

``{"status": "active", "age": {"$gte": 18}}`` becomes
``status = :status_1 AND age >= :age_1``. Top-level ``$and``/``$or``/
``$nor`` take lists of such mappings. Field names must be columns of the
table; nested paths are not supported by relational storage.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy import String, and_, asc, cast, desc, false, not_, or_, true

from .exceptions import QueryCompilationError
from .operators import build_default_registry

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select, Table

    from datakit_core.descriptor import FilterDescriptor

    from .operators import SQLAlchemyOperatorRegistry

_LOGICAL = ("$and", "$or", "$nor")


class QueryCompiler:
    """Per-table compiler for filters, search, sort and update patches."""

    def __init__(
        self, table: Table, registry: SQLAlchemyOperatorRegistry | None = None
    ) -> None:
        self._table = table
        self._registry = registry or build_default_registry()

    def column(self, name: str) -> Any:
        column = self._table.c.get(name)
        if column is None:
            raise QueryCompilationError(
                f"Table {self._table.name!r} has no column {name!r}"
            )
        return column

    # ── Filters ──────────────────────────────────────────────────

    def where(self, query: Any) -> ColumnElement[bool]:
        if query is None:
            return true()
        if not isinstance(query, Mapping):
            raise QueryCompilationError("Query must be an object")
        clauses = [self._compile_entry(key, value) for key, value in query.items()]
        return and_(true(), *clauses)

    def _compile_entry(self, key: str, value: Any) -> ColumnElement[bool]:
        if key in _LOGICAL:
            if not isinstance(value, list | tuple):
                raise QueryCompilationError(f"{key} expects an array of queries")
            parts = [self.where(sub) for sub in value]
            if key == "$and":
                return and_(true(), *parts)
            if key == "$or":
                return or_(false(), *parts)
            return not_(or_(false(), *parts))
        if key.startswith("$"):
            raise QueryCompilationError(f"Unsupported query operator: {key}")

        column = self.column(key)
        if isinstance(value, Mapping) and value and all(
            str(k).startswith("$") for k in value
        ):
            return and_(
                *[self._registry.apply(op, column, arg) for op, arg in value.items()]
            )
        return self._registry.apply("$eq", column, value)

    def search(
        self, term: str, fields: list[str] | None = None
    ) -> ColumnElement[bool]:
        """Case-insensitive ``LIKE`` match of *term* over *fields* or text columns."""
        if fields:
            columns = [self.column(f) for f in fields]
        else:
            columns = [c for c in self._table.c if isinstance(c.type, String)]
        if not columns:
            return false()
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        return or_(*[cast(c, String).ilike(pattern, escape="\\") for c in columns])

    def order_by(self, sort: list[str] | None) -> list[Any]:
        clauses: list[Any] = []
        for entry in sort or ():
            if entry.startswith("-"):
                clauses.append(desc(self.column(entry[1:])))
            else:
                clauses.append(asc(self.column(entry)))
        return clauses

    def apply(
        self, stmt: Select[Any], descriptor: FilterDescriptor | None
    ) -> Select[Any]:
        """Apply query, search, sort and the limit/offset window of *descriptor*."""
        if descriptor is None:
            return stmt
        stmt = self.filter(stmt, descriptor)
        order = self.order_by(descriptor.sort)
        if order:
            stmt = stmt.order_by(*order)
        if descriptor.offset and descriptor.offset > 0:
            stmt = stmt.offset(descriptor.offset)
        if descriptor.limit and descriptor.limit > 0:
            stmt = stmt.limit(descriptor.limit)
        return stmt

    def filter(
        self, stmt: Select[Any], descriptor: FilterDescriptor | None
    ) -> Select[Any]:
        """Apply only the row-selecting parts (for counting)."""
        if descriptor is None:
            return stmt
        if descriptor.query is not None:
            stmt = stmt.where(self.where(descriptor.query))
        if descriptor.search:
            stmt = stmt.where(self.search(descriptor.search, descriptor.search_fields))
        return stmt

    # ── Updates ──────────────────────────────────────────────────

    def values(self, patch: Mapping[str, Any]) -> dict[str, Any]:
        """``{"$set": ..., "$unset": ..., "$inc": ...}`` -> UPDATE values."""
        out: dict[str, Any] = {}
        for op, fields in patch.items():
            if op not in ("$set", "$unset", "$inc"):
                raise QueryCompilationError(f"Unsupported update operator: {op}")
            if not isinstance(fields, Mapping):
                raise QueryCompilationError(f"{op} expects an object")
            for name, value in fields.items():
                column = self.column(name)
                if op == "$set":
                    out[column.key] = value
                elif op == "$unset":
                    out[column.key] = None
                else:
                    out[column.key] = column + value
        return out

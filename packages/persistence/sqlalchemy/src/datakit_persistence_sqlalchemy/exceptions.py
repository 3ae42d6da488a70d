"""Exceptions for the SQLAlchemy persistence layer."""

from __future__ import annotations

from datakit_core.primitives.exceptions import PersistenceError


class SQLAlchemyPersistenceError(PersistenceError):
    """Base exception for all SQLAlchemy-specific persistence errors."""


class QueryCompilationError(SQLAlchemyPersistenceError):
    """Raised when a query mapping, sort or patch cannot be compiled to SQL."""


__all__: list[str] = [
    "QueryCompilationError",
    "SQLAlchemyPersistenceError",
]

"""SQLAlchemy (async Core) storage adapter for datakit."""

from __future__ import annotations

from .adapter import SQLAlchemyAdapter
from .compiler import QueryCompiler
from .exceptions import QueryCompilationError, SQLAlchemyPersistenceError
from .operators import (
    SQLAlchemyOperator,
    SQLAlchemyOperatorRegistry,
    build_default_registry,
)

__all__ = [
    "QueryCompilationError",
    "QueryCompiler",
    "SQLAlchemyAdapter",
    "SQLAlchemyOperator",
    "SQLAlchemyOperatorRegistry",
    "SQLAlchemyPersistenceError",
    "build_default_registry",
]

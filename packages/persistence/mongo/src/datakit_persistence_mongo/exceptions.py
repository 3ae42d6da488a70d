"""MongoDB persistence exceptions."""

from __future__ import annotations

from datakit_core.primitives.exceptions import PersistenceError


class MongoPersistenceError(PersistenceError):
    """Base for MongoDB persistence errors."""


class MongoConnectionError(MongoPersistenceError):
    """Raised when connection to MongoDB fails."""


class MongoQueryError(MongoPersistenceError):
    """Raised when a filter cannot be turned into a MongoDB query."""

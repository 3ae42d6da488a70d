"""MongoDB (Motor) storage adapter for datakit."""

from __future__ import annotations

from .adapter import MongoAdapter
from .connection import MongoConnectionManager
from .exceptions import MongoConnectionError, MongoPersistenceError, MongoQueryError
from .query_builder import MongoQueryBuilder
from .serialization import from_bson, object_id_to_str, to_bson, to_object_id

__all__ = [
    "MongoAdapter",
    "MongoConnectionError",
    "MongoConnectionManager",
    "MongoPersistenceError",
    "MongoQueryBuilder",
    "MongoQueryError",
    "from_bson",
    "object_id_to_str",
    "to_bson",
    "to_object_id",
]

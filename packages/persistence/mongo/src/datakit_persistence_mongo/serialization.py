"""Plain document <-> BSON value conversion (Decimal, UUID, ObjectId)."""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID

from bson import Decimal128, ObjectId


def to_bson(value: Any) -> Any:
    """Convert Python values to BSON-safe values, recursively."""
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, dict):
        return {k: to_bson(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [to_bson(v) for v in value]
    return value


def from_bson(value: Any) -> Any:
    """Convert BSON values back to plain Python values, recursively."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, dict):
        return {k: from_bson(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_bson(v) for v in value]
    return value


def to_object_id(value: Any) -> Any:
    """Hex strings become ``ObjectId``; any other id is passed through."""
    if isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def object_id_to_str(value: Any) -> Any:
    return str(value) if isinstance(value, ObjectId) else value

"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    ActionNotFoundError,
    AdapterNotConnectedError,
    ClientError,
    ConfigurationError,
    DataKitError,
    EntityNotFoundError,
    InfrastructureError,
    InvalidParameterError,
    PersistenceError,
    ValidationError,
)

__all__ = [
    "ActionNotFoundError",
    "AdapterNotConnectedError",
    "ClientError",
    "ConfigurationError",
    "DataKitError",
    "EntityNotFoundError",
    "InfrastructureError",
    "InvalidParameterError",
    "PersistenceError",
    "ValidationError",
]

"""Client-facing and infrastructure exceptions for datakit."""

from __future__ import annotations

from typing import Any


class DataKitError(Exception):
    """Root exception for the entire datakit toolkit."""


class ClientError(DataKitError):
    """Base class for errors caused by the caller's request.

    Carries an HTTP-equivalent ``code`` and an optional ``data`` payload
    that a transport layer can expose to the client as-is.
    """

    code: int = 400

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        if code is not None:
            self.code = code
        self.data: dict[str, Any] = data or {}
        super().__init__(message)


class InvalidParameterError(ClientError):
    """Raised when filter or request parameters are malformed."""

    def __init__(self, message: str, *, param: str | None = None) -> None:
        super().__init__(message, data={"param": param} if param else None)
        self.param = param


class EntityNotFoundError(ClientError):
    """Raised when an entity cannot be found by ID."""

    code = 404

    def __init__(self, entity_id: object) -> None:
        self.entity_id = entity_id
        super().__init__(
            f"Entity with id={entity_id!r} not found", data={"id": entity_id}
        )


class ValidationError(ClientError):
    """Raised when an entity fails validation before a write.

    Carries structured errors: ``{field: [messages]}``.
    """

    code = 422

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(
            f"Entity validation error: {self.errors}", data={"errors": self.errors}
        )


class ConfigurationError(DataKitError):
    """Raised when collection settings or registrations are invalid."""


class ActionNotFoundError(DataKitError):
    """Raised when a remote action name cannot be resolved."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Action {action!r} is not registered")


class InfrastructureError(DataKitError):
    """Base class for all infrastructure-related errors."""


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""


class AdapterNotConnectedError(PersistenceError):
    """Raised when an adapter is used before ``connect()``."""

"""CollectionSettings - per-collection configuration and population rules."""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .primitives.exceptions import ConfigurationError

if TYPE_CHECKING:
    from .ports.caller import IActionCaller

_SPLIT_RE = re.compile(r"[,\s]+")


def split_list(value: str) -> list[str]:
    """Split a comma and/or whitespace delimited string, dropping empties."""
    return [token for token in _SPLIT_RE.split(value) if token]


PopulateHandler = Callable[
    [list[Any], list[dict[str, Any]], "HandlerRule", "IActionCaller"],
    Awaitable[Any] | None,
]


def _empty_params() -> dict[str, Any]:
    return {}


@dataclass(frozen=True)
class ActionRule:
    """Resolve ids stored at ``field`` by calling remote ``action``.

    ``populate`` holds nested population paths always forwarded to the
    action; request-level child paths take precedence over them.
    """

    key: str
    field: str
    action: str
    params: dict[str, Any] = field(default_factory=_empty_params)
    populate: list[str] | None = None


@dataclass(frozen=True)
class HandlerRule:
    """Resolve ids stored at ``field`` with a custom coroutine.

    The handler receives ``(ids, docs, rule, ctx)`` and writes its results
    into ``docs`` itself.
    """

    key: str
    field: str
    handler: PopulateHandler


PopulationRule = ActionRule | HandlerRule


def normalize_rule(key: str, raw: Any) -> PopulationRule:
    """Normalize one declared population rule into its tagged form."""
    if isinstance(raw, ActionRule | HandlerRule):
        return raw
    if isinstance(raw, str):
        return ActionRule(key=key, field=key, action=raw)
    if callable(raw):
        return HandlerRule(key=key, field=key, handler=raw)
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"Population rule {key!r} must be an action name, mapping or "
            f"callable, got {type(raw).__name__}"
        )

    unknown = set(raw) - {"action", "handler", "field", "params", "populate"}
    if unknown:
        raise ConfigurationError(
            f"Population rule {key!r} has unknown options: {sorted(unknown)}"
        )
    action = raw.get("action")
    handler = raw.get("handler")
    if (action is None) == (handler is None):
        raise ConfigurationError(
            f"Population rule {key!r} needs exactly one of 'action' or 'handler'"
        )
    source = raw.get("field") or key
    if handler is not None:
        if not callable(handler):
            raise ConfigurationError(f"Population handler for {key!r} is not callable")
        return HandlerRule(key=key, field=source, handler=handler)

    if not isinstance(action, str) or not action:
        raise ConfigurationError(f"Population action for {key!r} must be a string")
    params = raw.get("params") or {}
    if not isinstance(params, Mapping):
        raise ConfigurationError(f"Population params for {key!r} must be a mapping")
    populate = raw.get("populate")
    if isinstance(populate, str):
        populate = split_list(populate)
    return ActionRule(
        key=key,
        field=source,
        action=action,
        params=dict(params),
        populate=list(populate) if populate else None,
    )


class CollectionSettings(BaseModel):
    """Immutable configuration of one data-access collection.

    ``fields`` is the allow-list clients may project (``None`` = no
    restriction), ``exclude_fields`` is always stripped from responses.
    ``max_page_size``/``max_limit`` clamp only when positive.
    ``populates`` accepts action names, rule mappings or callables and is
    normalized into :class:`ActionRule`/:class:`HandlerRule` values.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id_field: str = "_id"
    fields: list[str] | None = None
    exclude_fields: list[str] | None = None
    populates: dict[str, Any] | None = None
    page_size: int = Field(default=10, ge=1)
    max_page_size: int = 100
    max_limit: int = -1
    use_dot_notation: bool = False

    @field_validator("fields", "exclude_fields", mode="before")
    @classmethod
    def _split_strings(cls, value: Any) -> Any:
        if isinstance(value, str):
            return split_list(value)
        return value

    @field_validator("populates", mode="before")
    @classmethod
    def _normalize_populates(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, Mapping):
            raise ConfigurationError("populates must be a mapping of key -> rule")
        return {str(key): normalize_rule(str(key), rule) for key, rule in value.items()}

    @property
    def rules(self) -> list[PopulationRule]:
        """Normalized population rules in declaration order."""
        return list((self.populates or {}).values())

    @property
    def has_field_allow_list(self) -> bool:
        return self.fields is not None

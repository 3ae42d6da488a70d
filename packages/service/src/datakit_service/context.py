"""LocalBroker and Context - in-process action dispatch.

Stand-in for a service broker: collections register their operations as
named actions and population rules reach other collections through
``ctx.call``. Any object with the same ``call`` coroutine satisfies
:class:`~datakit_core.ports.caller.IActionCaller`.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from datakit_core.primitives.exceptions import ActionNotFoundError, ConfigurationError

logger = logging.getLogger(__name__)

ActionHandler = Callable[["Context"], Awaitable[Any]]


class Context:
    """Request context handed to action handlers.

    ``meta`` is shared with every child context created through
    :meth:`call`; ``params`` belong to this call only.
    """

    def __init__(
        self,
        broker: LocalBroker,
        params: dict[str, Any] | None = None,
        meta: dict[str, Any] | None = None,
        *,
        action: str | None = None,
        parent: Context | None = None,
    ) -> None:
        self.broker = broker
        self.params: dict[str, Any] = params if params is not None else {}
        self.meta: dict[str, Any] = meta if meta is not None else {}
        self.action = action
        self.parent = parent
        self.level: int = parent.level + 1 if parent is not None else 1

    async def call(self, action: str, params: dict[str, Any] | None = None) -> Any:
        """Invoke *action* in a child context."""
        return await self.broker.call(action, params, meta=self.meta, parent=self)

    def __repr__(self) -> str:
        return f"Context(action={self.action!r}, level={self.level})"


class LocalBroker:
    """Registry of named async action handlers.

    **Conflict detection:** registering a second handler under the same
    name raises :class:`~datakit_core.primitives.exceptions.ConfigurationError`.
    """

    def __init__(self) -> None:
        self._actions: dict[str, ActionHandler] = {}

    # ── Registration ─────────────────────────────────────────────

    def register(self, name: str, handler: ActionHandler) -> None:
        existing = self._actions.get(name)
        if existing is not None and existing is not handler:
            raise ConfigurationError(f"Duplicate action handler for {name!r}")
        self._actions[name] = handler
        logger.debug("Registered action %s", name)

    def unregister(self, name: str) -> None:
        self._actions.pop(name, None)

    # ── Lookup ───────────────────────────────────────────────────

    def has(self, name: str) -> bool:
        return name in self._actions

    @property
    def actions(self) -> list[str]:
        return list(self._actions)

    # ── Dispatch ─────────────────────────────────────────────────

    def context(
        self, params: dict[str, Any] | None = None, meta: dict[str, Any] | None = None
    ) -> Context:
        """Create a root context, e.g. for calling a service directly."""
        return Context(self, params, meta)

    async def call(
        self,
        action: str,
        params: dict[str, Any] | None = None,
        *,
        meta: dict[str, Any] | None = None,
        parent: Context | None = None,
    ) -> Any:
        handler = self._actions.get(action)
        if handler is None:
            raise ActionNotFoundError(action)
        ctx = Context(self, dict(params or {}), meta, action=action, parent=parent)
        return await handler(ctx)

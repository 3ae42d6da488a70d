"""IActionCaller - the request context seen by population and hooks."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IActionCaller(Protocol):
    """Anything able to invoke a named remote action.

    Population lookups go through ``call`` with
    ``{"id": [...], "mapping": True, ...}`` and expect a mapping from id to
    resolved document back. Unknown ids must simply be absent from the
    result.
    """

    async def call(self, action: str, params: dict[str, Any] | None = None) -> Any:
        ...

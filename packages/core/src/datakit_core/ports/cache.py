"""ICacheService - Protocol for cache invalidation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ICacheService(Protocol):
    """
    Cache seam used after writes.

    Only namespace invalidation is required; reading and writing cached
    responses is left to the transport layer.
    """

    async def clear_namespace(self, prefix: str) -> None:
        """Clear all keys starting with prefix."""
        ...

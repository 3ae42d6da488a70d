"""Paginator - one page of rows plus the total, wrapped in an envelope."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from datakit_filtering.pagination import ListEnvelope

if TYPE_CHECKING:
    from datakit_core.descriptor import FilterDescriptor
    from datakit_core.ports.adapter import IAdapter
    from datakit_core.ports.caller import IActionCaller

Transform = Callable[[Any, "FilterDescriptor", Any], Awaitable[Any]]


class Paginator:
    """Builds :class:`~datakit_filtering.pagination.ListEnvelope` results.

    The page read and the unbounded count run concurrently and are not
    isolated from each other: a write landing between them can make
    ``total`` and ``rows`` disagree slightly.
    """

    def __init__(self, adapter: IAdapter) -> None:
        self._adapter = adapter

    async def paginate(
        self,
        ctx: IActionCaller | None,
        descriptor: FilterDescriptor,
        transform: Transform,
    ) -> ListEnvelope:
        """*descriptor* must come from a paginated normalization."""
        rows, total = await asyncio.gather(
            self._adapter.find(descriptor),
            self._adapter.count(descriptor.without_pagination()),
        )
        docs = await transform(ctx, descriptor, rows)
        page_size = descriptor.page_size or descriptor.limit or 0
        return ListEnvelope.build(
            rows=docs, total=total, page=descriptor.page or 1, page_size=page_size
        )

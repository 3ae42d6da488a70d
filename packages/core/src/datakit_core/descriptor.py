"""FilterDescriptor - canonical, backend-neutral query descriptor.

Produced by the filter normalizer and consumed by every adapter's
``find``/``count``. The ``query`` attribute is opaque to datakit itself;
each adapter interprets it in its own dialect.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

#: Wire (request) parameter names -> descriptor attribute names.
PARAM_ALIASES: dict[str, str] = {
    "searchFields": "search_fields",
    "excludeFields": "exclude_fields",
    "pageSize": "page_size",
}

#: Descriptor attribute names -> wire parameter names.
WIRE_NAMES: dict[str, str] = {v: k for k, v in PARAM_ALIASES.items()}


def _empty_extra() -> dict[str, Any]:
    return {}


@dataclass(frozen=True)
class FilterDescriptor:
    """Normalized filter for one pipeline run.

    ``sort`` entries are field names, optionally prefixed with ``-`` for
    descending order. ``fields``/``exclude_fields``/``populate`` are dotted
    paths. Request parameters the descriptor does not model (``id``,
    ``mapping``, ...) are kept in ``extra``.
    """

    query: Any = None
    search: str | None = None
    search_fields: list[str] | None = None
    sort: list[str] | None = None
    limit: int | None = None
    offset: int | None = None
    fields: list[str] | None = None
    exclude_fields: list[str] | None = None
    populate: list[str] | None = None
    page: int | None = None
    page_size: int | None = None
    extra: dict[str, Any] = field(default_factory=_empty_extra)

    def replace(self, **changes: Any) -> FilterDescriptor:
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def without_pagination(self) -> FilterDescriptor:
        """Return a copy with ``limit``/``offset`` stripped (for counting)."""
        return dataclasses.replace(self, limit=None, offset=None)

    def to_params(self) -> dict[str, Any]:
        """Render back into request-parameter form (wire names, no ``None``)."""
        params: dict[str, Any] = dict(self.extra)
        for f in dataclasses.fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if value is not None:
                params[WIRE_NAMES.get(f.name, f.name)] = value
        return params

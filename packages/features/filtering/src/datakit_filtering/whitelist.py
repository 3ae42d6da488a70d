"""Field authorization against a collection's projection allow-list."""

from __future__ import annotations

from collections.abc import Sequence


def authorize_fields(
    requested: Sequence[str] | None, allow_list: Sequence[str] | None
) -> list[str] | None:
    """Resolve *requested* projection paths against *allow_list*.

    With no allow-list configured the request is returned unchanged. Else
    each requested path is kept when it is allowed verbatim or when one of
    its ancestors is allowed; a requested parent additionally expands into
    every allowed entry nested below it. Anything else is dropped silently.

    Order follows *requested*; expansions follow *allow_list* order.
    Duplicates produced by expansion are kept.
    """
    if not allow_list:
        return list(requested) if requested is not None else None

    allowed = list(allow_list)
    result: list[str] = []
    for field in requested or ():
        if field in allowed:
            result.append(field)
            continue

        parts = field.split(".")
        while len(parts) > 1:
            parts.pop()
            if ".".join(parts) in allowed:
                result.append(field)
                break

        prefix = field + "."
        result.extend(entry for entry in allowed if entry.startswith(prefix))
    return result


class FieldWhitelist:
    """Per-collection projectable fields."""

    def __init__(self, projectable_fields: Sequence[str] | None = None) -> None:
        self.projectable_fields = list(projectable_fields) if projectable_fields else []

    @property
    def restricted(self) -> bool:
        return bool(self.projectable_fields)

    def authorize(self, requested: Sequence[str] | None) -> list[str] | None:
        return authorize_fields(requested, self.projectable_fields)

    def allows(self, field: str) -> bool:
        """True if *field* would survive :meth:`authorize` as requested."""
        return field in (self.authorize([field]) or [])

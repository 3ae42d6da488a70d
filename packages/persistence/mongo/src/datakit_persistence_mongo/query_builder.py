"""MongoQueryBuilder - FilterDescriptor -> find() arguments."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .exceptions import MongoQueryError
from .serialization import to_bson

if TYPE_CHECKING:
    from datakit_core.descriptor import FilterDescriptor

SCORE_FIELD = "_score"
_TEXT_SCORE = {"$meta": "textScore"}


class MongoQueryBuilder:
    """Compiles a normalized descriptor into filter, projection and sort.

    ``query`` is already a MongoDB filter document and is passed through;
    a non-empty ``search`` adds a ``$text`` clause and switches the sort to
    the text score.
    """

    def build_filter(self, descriptor: FilterDescriptor | None) -> dict[str, Any]:
        if descriptor is None:
            return {}
        query = descriptor.query
        if query is None:
            match: dict[str, Any] = {}
        elif isinstance(query, Mapping):
            match = to_bson(dict(query))
        else:
            raise MongoQueryError("MongoDB 'query' must be an object")
        if descriptor.search:
            match["$text"] = {"$search": descriptor.search}
        return match

    def build_projection(
        self, descriptor: FilterDescriptor | None
    ) -> dict[str, Any] | None:
        if descriptor is not None and descriptor.search:
            return {SCORE_FIELD: _TEXT_SCORE}
        return None

    def build_sort(self, descriptor: FilterDescriptor | None) -> list[tuple[str, Any]]:
        """``["-age", "name"]`` -> ``[("age", -1), ("name", 1)]``."""
        if descriptor is None:
            return []
        if descriptor.search:
            return [(SCORE_FIELD, _TEXT_SCORE)]
        result: list[tuple[str, Any]] = []
        for item in descriptor.sort or ():
            if item.startswith("-"):
                result.append((item[1:], -1))
            else:
                result.append((item, 1))
        return result

"""FilterNormalizer - raw request params -> canonical FilterDescriptor."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from datakit_core.descriptor import PARAM_ALIASES, FilterDescriptor
from datakit_core.settings import split_list

from .exceptions import FilterParseError
from .pagination import page_window

if TYPE_CHECKING:
    from datakit_core.settings import CollectionSettings

logger = logging.getLogger("datakit.filtering")

_INT_RE = re.compile(r"^[+-]?\d+$")

_INT_PARAMS = ("limit", "offset", "page", "page_size")
_LIST_PARAMS = ("sort", "fields", "exclude_fields", "populate", "search_fields")
_KNOWN = frozenset(("query", "search", *_INT_PARAMS, *_LIST_PARAMS))


def _coerce_int(name: str, value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise FilterParseError(f"{name!r} must be an integer", param=name)
    if isinstance(value, float):
        if not value.is_integer():
            raise FilterParseError(f"{name!r} must be an integer", param=name)
        value = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if not _INT_RE.match(text):
            raise FilterParseError(
                f"{name!r} must be an integer, got {value!r}", param=name
            )
        value = int(text)
    elif not isinstance(value, int):
        raise FilterParseError(f"{name!r} must be an integer", param=name)
    if value < 0:
        raise FilterParseError(f"{name!r} must not be negative", param=name)
    return value


def _coerce_list(name: str, value: Any) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return split_list(value)
    if isinstance(value, list | tuple):
        return list(value)
    raise FilterParseError(f"{name!r} must be a string or an array", param=name)


def _coerce_query(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise FilterParseError(
                f"'query' is not valid JSON: {exc.msg}", param="query"
            ) from exc
    if not isinstance(value, Mapping | list):
        raise FilterParseError("'query' must be an object or an array", param="query")
    return value


class FilterNormalizer:
    """Turn heterogeneous request params into a :class:`FilterDescriptor`.

    Pure: neither the input mapping nor the settings are modified, and
    feeding a descriptor back in returns an equal descriptor.
    """

    def __init__(self, settings: CollectionSettings) -> None:
        self._settings = settings

    def normalize(
        self,
        raw: Mapping[str, Any] | FilterDescriptor | None,
        *,
        paginated: bool = False,
    ) -> FilterDescriptor:
        params = self._canonical_keys(raw)

        search = params.get("search")
        if search is not None and not isinstance(search, str):
            raise FilterParseError("'search' must be a string", param="search")

        values: dict[str, Any] = {
            "query": _coerce_query(params.get("query")),
            "search": search,
        }
        for name in _INT_PARAMS:
            values[name] = _coerce_int(name, params.get(name))
        for name in _LIST_PARAMS:
            values[name] = _coerce_list(name, params.get(name))

        if paginated:
            self._apply_pagination(values)

        max_limit = self._settings.max_limit
        if max_limit > 0 and values["limit"] is not None and values["limit"] > max_limit:
            logger.debug("Clamping limit %s to %s", values["limit"], max_limit)
            values["limit"] = max_limit

        extra = {k: v for k, v in params.items() if k not in _KNOWN}
        return FilterDescriptor(extra=extra, **values)

    def _apply_pagination(self, values: dict[str, Any]) -> None:
        page_size = values["page_size"] or self._settings.page_size
        page = values["page"] or 1
        max_page_size = self._settings.max_page_size
        if max_page_size > 0 and page_size > max_page_size:
            logger.debug("Clamping page size %s to %s", page_size, max_page_size)
            page_size = max_page_size
        values["page"] = page
        values["page_size"] = page_size
        values["limit"], values["offset"] = page_window(page, page_size)

    @staticmethod
    def _canonical_keys(
        raw: Mapping[str, Any] | FilterDescriptor | None,
    ) -> dict[str, Any]:
        if raw is None:
            return {}
        if isinstance(raw, FilterDescriptor):
            params = {name: getattr(raw, name) for name in _KNOWN}
            params.update({k: v for k, v in raw.extra.items() if k not in _KNOWN})
            return params
        if not isinstance(raw, Mapping):
            raise FilterParseError("Request params must be a mapping")
        params = {}
        for key, value in raw.items():
            params[PARAM_ALIASES.get(key, key)] = value
        return params


def normalize(
    raw: Mapping[str, Any] | FilterDescriptor | None,
    settings: CollectionSettings,
    *,
    paginated: bool = False,
) -> FilterDescriptor:
    """Functional shortcut for ``FilterNormalizer(settings).normalize(...)``."""
    return FilterNormalizer(settings).normalize(raw, paginated=paginated)

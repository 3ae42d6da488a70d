"""Request parameter normalization, field authorization and page math."""

from __future__ import annotations

from .exceptions import FilterParseError
from .normalizer import FilterNormalizer, normalize
from .pagination import ListEnvelope, page_window, total_pages
from .whitelist import FieldWhitelist, authorize_fields

__all__ = [
    "FieldWhitelist",
    "FilterNormalizer",
    "FilterParseError",
    "ListEnvelope",
    "authorize_fields",
    "normalize",
    "page_window",
    "total_pages",
]

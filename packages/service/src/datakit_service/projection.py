"""Field projection and exclusion over transformed documents."""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any

from datakit_core.paths import project, unset_path


def filter_fields(doc: dict[str, Any], fields: Sequence[str] | None) -> dict[str, Any]:
    """Keep only *fields* (dotted paths, ``$`` = every array element).

    ``None`` means no projection and returns *doc* itself; otherwise a
    fresh document is built and missing paths are simply absent.
    """
    if fields is None:
        return doc
    return project(doc, list(fields))


def exclude_fields(doc: dict[str, Any], fields: Sequence[str] | None) -> dict[str, Any]:
    """Remove *fields* from a deep copy of *doc*; no-op without fields."""
    if not fields:
        return doc
    res = copy.deepcopy(doc)
    for path in fields:
        unset_path(res, path)
    return res

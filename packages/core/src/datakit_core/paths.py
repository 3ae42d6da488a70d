"""
Dot-notation path helpers over plain nested documents.

Documents are trees of mappings and lists. A path is a dotted string such
as ``address.city`` or ``cars.1.model``; numeric segments index lists. In
projections a ``$`` segment applied to a list means "every element"
(``cars.$.wheels.$.placement``). On a mapping, ``$`` is an ordinary key.

These are pure-Python helpers with no infrastructure dependencies.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, MutableMapping
from typing import Any

WILDCARD = "$"


class _Missing:
    """Sentinel for "no value at this path"."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

# Unfilled list slot in a projection; becomes ``None`` in the final result.
_HOLE = object()


def split_path(path: str) -> list[str]:
    """Split a dotted path into segments."""
    return path.split(".") if path else []


def _is_index(segment: str) -> bool:
    return segment.isdigit()


def _resolve_key(node: Mapping[Any, Any], segment: str) -> Any:
    """Return the actual key in *node* addressed by *segment*, or MISSING."""
    if segment in node:
        return segment
    if _is_index(segment) and int(segment) in node:
        return int(segment)
    return MISSING


def _step(node: Any, segment: str) -> Any:
    if isinstance(node, Mapping):
        key = _resolve_key(node, segment)
        return MISSING if key is MISSING else node[key]
    if isinstance(node, list | tuple) and _is_index(segment):
        idx = int(segment)
        return node[idx] if idx < len(node) else MISSING
    return MISSING


def get_path(doc: Any, path: str, default: Any = MISSING) -> Any:
    """Return the value at *path* or *default* when any segment is absent."""
    node = doc
    for segment in split_path(path):
        node = _step(node, segment)
        if node is MISSING:
            return default
    return node


def has_path(doc: Any, path: str) -> bool:
    return get_path(doc, path) is not MISSING


def set_path(doc: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Set *value* at *path*, creating intermediate containers.

    A missing intermediate becomes a list when the following segment is
    numeric, otherwise a dict. Scalars in the way are replaced.
    """
    segments = split_path(path)
    if not segments:
        raise ValueError("path must not be empty")
    node: Any = doc
    for i, segment in enumerate(segments):
        last = i == len(segments) - 1
        nxt: Any = None if last else ([] if _is_index(segments[i + 1]) else {})
        if isinstance(node, list) and _is_index(segment):
            idx = int(segment)
            if idx >= len(node):
                node.extend([None] * (idx + 1 - len(node)))
            if last:
                node[idx] = value
                return
            if not isinstance(node[idx], MutableMapping | list):
                node[idx] = nxt
            node = node[idx]
            continue
        key = _resolve_key(node, segment)
        if key is MISSING:
            key = segment
        if last:
            node[key] = value
            return
        if not isinstance(node.get(key), MutableMapping | list):
            node[key] = nxt
        node = node[key]


def unset_path(doc: Any, path: str) -> bool:
    """Remove the value at *path*. Returns True if something was removed."""
    segments = split_path(path)
    if not segments:
        return False
    parent = get_path(doc, ".".join(segments[:-1])) if len(segments) > 1 else doc
    leaf = segments[-1]
    if isinstance(parent, MutableMapping):
        key = _resolve_key(parent, leaf)
        if key is MISSING:
            return False
        del parent[key]
        return True
    if isinstance(parent, list) and _is_index(leaf) and int(leaf) < len(parent):
        # Keep positions stable for sibling paths.
        parent[int(leaf)] = None
        return True
    return False


def flatten(obj: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into dotted keys. Lists are kept as values."""
    out: dict[str, Any] = {}
    for key, value in obj.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            out.update(flatten(value, dotted))
        else:
            out[dotted] = value
    return out


# ---------------------------------------------------------------------------
# Projection (deep get with wildcard)
# ---------------------------------------------------------------------------


def _project_value(value: Any, rest: list[str]) -> Any:
    if not rest:
        return copy.deepcopy(value)
    return _project(value, rest)


def _project(node: Any, segments: list[str]) -> Any:
    """Project *segments* out of *node*, returning a fresh partial tree."""
    segment, rest = segments[0], segments[1:]

    if segment == WILDCARD and isinstance(node, list | tuple):
        items = [_project_value(item, rest) for item in node]
        if all(item is MISSING for item in items):
            return MISSING
        return [{} if item is MISSING else item for item in items]

    if isinstance(node, Mapping):
        key = _resolve_key(node, segment)
        if key is MISSING:
            return MISSING
        value = _project_value(node[key], rest)
        return MISSING if value is MISSING else {key: value}

    if isinstance(node, list | tuple) and _is_index(segment):
        idx = int(segment)
        if idx >= len(node):
            return MISSING
        value = _project_value(node[idx], rest)
        if value is MISSING:
            return MISSING
        return [_HOLE] * idx + [value]

    return MISSING


def _merge(dst: Any, src: Any) -> Any:
    """Merge projection *src* into *dst*; holes in *src* never overwrite."""
    if isinstance(dst, dict) and isinstance(src, dict):
        for key, value in src.items():
            dst[key] = _merge(dst[key], value) if key in dst else value
        return dst
    if isinstance(dst, list) and isinstance(src, list):
        if len(dst) < len(src):
            dst.extend([_HOLE] * (len(src) - len(dst)))
        for idx, value in enumerate(src):
            if value is _HOLE:
                continue
            dst[idx] = value if dst[idx] is _HOLE else _merge(dst[idx], value)
        return dst
    return src


def _fill_holes(node: Any) -> Any:
    if isinstance(node, dict):
        for key, value in node.items():
            node[key] = _fill_holes(value)
    elif isinstance(node, list):
        for idx, value in enumerate(node):
            node[idx] = None if value is _HOLE else _fill_holes(value)
    return node


def project(doc: Mapping[str, Any], paths: list[str]) -> dict[str, Any]:
    """Build a fresh document holding only *paths* of *doc*.

    Missing paths are simply absent. Paths are merged in order, so
    ``["a.b", "a.c"]`` yields ``{"a": {"b": ..., "c": ...}}``.
    """
    result: dict[str, Any] = {}
    for path in paths:
        segments = split_path(path)
        if not segments:
            continue
        projected = _project(doc, segments)
        if projected is MISSING or not isinstance(projected, dict):
            continue
        _merge(result, projected)
    return _fill_holes(result)  # type: ignore[no-any-return]

"""Filtering package exceptions."""

from __future__ import annotations

from datakit_core.primitives.exceptions import InvalidParameterError


class FilterParseError(InvalidParameterError):
    """Raised when a request parameter cannot be normalized."""

"""
Mongo-style query evaluation for the in-memory adapter.

Each ``$``-operator is an isolated :class:`MemoryOperator` strategy held in
a :class:`MemoryOperatorRegistry`; :class:`QueryMatcher` walks the query
mapping and dispatches field conditions to the registry.

Supported: ``$eq $ne $gt $gte $lt $lte $in $nin $exists $regex`` on
(dotted) field paths, plus the ``$and``/``$or``/``$nor`` composites.
Array fields match when any element satisfies an equality/membership
condition, as MongoDB does.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from ...paths import MISSING, get_path
from ...primitives.exceptions import InvalidParameterError


class MemoryOperator(ABC):
    """Strategy interface for evaluating one query operator in memory."""

    #: The ``$``-operator this strategy handles.
    name: str

    @abstractmethod
    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        """Return True if *field_value* satisfies *condition_value*.

        *field_value* is ``MISSING`` when the document has no such path.
        """
        ...


def _candidates(field_value: Any) -> list[Any]:
    if isinstance(field_value, list):
        return [field_value, *field_value]
    return [field_value]


class EqualOperator(MemoryOperator):
    name = "$eq"

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is MISSING:
            return condition_value is None
        return any(c == condition_value for c in _candidates(field_value))


class NotEqualOperator(MemoryOperator):
    name = "$ne"

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return not EqualOperator().evaluate(field_value, condition_value)


class _OrderingOperator(MemoryOperator):
    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is MISSING or field_value is None:
            return False
        for candidate in _candidates(field_value):
            try:
                if self._compare(candidate, condition_value):
                    return True
            except TypeError:
                continue
        return False

    @abstractmethod
    def _compare(self, left: Any, right: Any) -> bool: ...


class GreaterThanOperator(_OrderingOperator):
    name = "$gt"

    def _compare(self, left: Any, right: Any) -> bool:
        return bool(left > right)


class GreaterEqualOperator(_OrderingOperator):
    name = "$gte"

    def _compare(self, left: Any, right: Any) -> bool:
        return bool(left >= right)


class LessThanOperator(_OrderingOperator):
    name = "$lt"

    def _compare(self, left: Any, right: Any) -> bool:
        return bool(left < right)


class LessEqualOperator(_OrderingOperator):
    name = "$lte"

    def _compare(self, left: Any, right: Any) -> bool:
        return bool(left <= right)


class InOperator(MemoryOperator):
    name = "$in"

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if not isinstance(condition_value, list | tuple | set):
            raise InvalidParameterError("$in needs an array", param="query")
        eq = EqualOperator()
        return any(eq.evaluate(field_value, v) for v in condition_value)


class NotInOperator(MemoryOperator):
    name = "$nin"

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return not InOperator().evaluate(field_value, condition_value)


class ExistsOperator(MemoryOperator):
    name = "$exists"

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return (field_value is not MISSING) == bool(condition_value)


class RegexOperator(MemoryOperator):
    name = "$regex"

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is MISSING or field_value is None:
            return False
        pattern = (
            condition_value
            if isinstance(condition_value, re.Pattern)
            else re.compile(str(condition_value))
        )
        return any(
            isinstance(c, str) and pattern.search(c) is not None
            for c in _candidates(field_value)
        )


class MemoryOperatorRegistry:
    """
    Registry of MemoryOperator instances keyed by operator name.

    Usage::

        registry = MemoryOperatorRegistry()
        registry.register(EqualOperator())

        registry.evaluate("$eq", actual, expected)
    """

    def __init__(self) -> None:
        self._operators: dict[str, MemoryOperator] = {}

    def register(self, operator: MemoryOperator) -> None:
        self._operators[operator.name] = operator

    def register_all(self, *operators: MemoryOperator) -> None:
        for op in operators:
            self.register(op)

    def get(self, name: str) -> MemoryOperator | None:
        return self._operators.get(name)

    def has(self, name: str) -> bool:
        return name in self._operators

    def evaluate(self, name: str, field_value: Any, condition_value: Any) -> bool:
        """
        Look up the operator and evaluate.

        Raises:
            InvalidParameterError: If the operator is not registered.
        """
        op = self.get(name)
        if op is None:
            raise InvalidParameterError(
                f"Unsupported operator for in-memory evaluation: {name}",
                param="query",
            )
        return op.evaluate(field_value, condition_value)


def build_default_registry() -> MemoryOperatorRegistry:
    """Create a registry populated with every built-in operator."""
    registry = MemoryOperatorRegistry()
    registry.register_all(
        EqualOperator(),
        NotEqualOperator(),
        GreaterThanOperator(),
        GreaterEqualOperator(),
        LessThanOperator(),
        LessEqualOperator(),
        InOperator(),
        NotInOperator(),
        ExistsOperator(),
        RegexOperator(),
    )
    return registry


class QueryMatcher:
    """Evaluates a Mongo-style query mapping against plain documents."""

    _COMPOSITES = ("$and", "$or", "$nor")

    def __init__(self, registry: MemoryOperatorRegistry | None = None) -> None:
        self._registry = registry or build_default_registry()

    def matches(self, doc: Mapping[str, Any], query: Any) -> bool:
        if query is None:
            return True
        if not isinstance(query, Mapping):
            raise InvalidParameterError(
                "In-memory queries must be mappings", param="query"
            )
        return all(self._match_clause(doc, key, cond) for key, cond in query.items())

    def _match_clause(self, doc: Mapping[str, Any], key: str, cond: Any) -> bool:
        if key in self._COMPOSITES:
            if not isinstance(cond, list | tuple):
                raise InvalidParameterError(f"{key} needs an array", param="query")
            results = (self.matches(doc, sub) for sub in cond)
            if key == "$and":
                return all(results)
            if key == "$or":
                return any(results)
            return not any(results)
        if key.startswith("$"):
            raise InvalidParameterError(
                f"Unsupported top-level operator: {key}", param="query"
            )

        value = get_path(doc, key)
        if isinstance(cond, Mapping) and cond and all(
            str(k).startswith("$") for k in cond
        ):
            options = cond.get("$options", "")
            for op, expected in cond.items():
                if op == "$options":
                    continue
                if op == "$regex" and options:
                    expected = _compile_regex(expected, options)
                if not self._registry.evaluate(op, value, expected):
                    return False
            return True
        if isinstance(cond, re.Pattern):
            return self._registry.evaluate("$regex", value, cond)
        return self._registry.evaluate("$eq", value, cond)


def _compile_regex(pattern: Any, options: str) -> re.Pattern[str]:
    flags = 0
    if "i" in options:
        flags |= re.IGNORECASE
    if "m" in options:
        flags |= re.MULTILINE
    if "s" in options:
        flags |= re.DOTALL
    return re.compile(str(pattern), flags)

"""
Column operator strategies for the query compiler.

Each ``$``-operator of a query mapping (``{"age": {"$gte": 18}}``) is an
isolated :class:`SQLAlchemyOperator` registered in a
:class:`SQLAlchemyOperatorRegistry`, mirroring the in-memory matcher of
``datakit_core``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, cast

from .exceptions import QueryCompilationError

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement


class SQLAlchemyOperator(ABC):
    """Strategy compiling one operator into a ``ColumnElement[bool]``."""

    name: str

    @abstractmethod
    def apply(self, column: Any, value: Any) -> ColumnElement[bool]: ...


class EqualOperator(SQLAlchemyOperator):
    name = "$eq"

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        if value is None:
            return cast("ColumnElement[bool]", column.is_(None))
        return cast("ColumnElement[bool]", column == value)


class NotEqualOperator(SQLAlchemyOperator):
    name = "$ne"

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        if value is None:
            return cast("ColumnElement[bool]", column.is_not(None))
        # SQL ``!=`` drops NULL rows; a missing value is "not equal" too.
        return cast("ColumnElement[bool]", (column != value) | column.is_(None))


class GreaterThanOperator(SQLAlchemyOperator):
    name = "$gt"

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column > value)


class GreaterEqualOperator(SQLAlchemyOperator):
    name = "$gte"

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column >= value)


class LessThanOperator(SQLAlchemyOperator):
    name = "$lt"

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column < value)


class LessEqualOperator(SQLAlchemyOperator):
    name = "$lte"

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column <= value)


class InOperator(SQLAlchemyOperator):
    name = "$in"

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.in_(_as_list(self.name, value)))


class NotInOperator(SQLAlchemyOperator):
    name = "$nin"

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", ~column.in_(_as_list(self.name, value)))


class ExistsOperator(SQLAlchemyOperator):
    """A column always exists; ``$exists`` tests for non-NULL."""

    name = "$exists"

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        if value:
            return cast("ColumnElement[bool]", column.is_not(None))
        return cast("ColumnElement[bool]", column.is_(None))


class RegexOperator(SQLAlchemyOperator):
    name = "$regex"

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.regexp_match(value))


def _as_list(name: str, value: Any) -> list[Any]:
    if not isinstance(value, list | tuple | set):
        raise QueryCompilationError(f"{name} expects an array")
    return list(value)


class SQLAlchemyOperatorRegistry:
    """Registry of :class:`SQLAlchemyOperator` instances keyed by name."""

    def __init__(self) -> None:
        self._operators: dict[str, SQLAlchemyOperator] = {}

    def register(self, operator: SQLAlchemyOperator) -> None:
        self._operators[operator.name] = operator

    def register_all(self, *operators: SQLAlchemyOperator) -> None:
        for op in operators:
            self.register(op)

    def get(self, name: str) -> SQLAlchemyOperator | None:
        return self._operators.get(name)

    def has(self, name: str) -> bool:
        return name in self._operators

    @property
    def supported_operators(self) -> set[str]:
        return set(self._operators)

    def apply(self, name: str, column: Any, value: Any) -> ColumnElement[bool]:
        """
        Look up the operator and apply.

        Raises:
            QueryCompilationError: If the operator is not registered.
        """
        op = self.get(name)
        if op is None:
            raise QueryCompilationError(f"Unsupported query operator: {name}")
        return op.apply(column, value)


def build_default_registry() -> SQLAlchemyOperatorRegistry:
    registry = SQLAlchemyOperatorRegistry()
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

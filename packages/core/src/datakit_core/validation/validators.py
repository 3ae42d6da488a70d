"""Entity validators: pydantic-model and plain-callable flavours."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from ..primitives.exceptions import ValidationError
from .result import ValidationResult

if TYPE_CHECKING:
    from pydantic import BaseModel


class PydanticEntityValidator:
    """Validates raw entity mappings against a pydantic model class.

    Any ``pydantic.ValidationError`` is converted into a
    :class:`~datakit_core.validation.result.ValidationResult` keyed by the
    dotted error location.
    """

    def __init__(self, model_cls: type[BaseModel]) -> None:
        self._model_cls = model_cls

    async def validate(self, entity: dict[str, Any]) -> ValidationResult:
        try:
            self._model_cls.model_validate(entity)
            return ValidationResult.success()
        except PydanticValidationError as exc:
            errors: dict[str, list[str]] = {}
            for error in exc.errors():
                loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
                msg = error.get("msg", "validation error")
                errors.setdefault(loc, []).append(msg)
            return ValidationResult.failure(errors)


EntityCheck = Callable[[dict[str, Any]], "bool | None | Awaitable[bool | None]"]


class CallableEntityValidator:
    """Wraps a sync or async predicate.

    The callable may return ``False`` (generic failure), ``True``/``None``
    (valid) or raise :class:`~datakit_core.primitives.exceptions.ValidationError`
    to report field-level errors.
    """

    def __init__(self, check: EntityCheck, *, message: str = "Entity is invalid") -> None:
        self._check = check
        self._message = message

    async def validate(self, entity: dict[str, Any]) -> ValidationResult:
        try:
            outcome = self._check(entity)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except ValidationError as exc:
            return ValidationResult.failure(exc.errors)
        if outcome is False:
            return ValidationResult.failure({"__root__": [self._message]})
        return ValidationResult.success()

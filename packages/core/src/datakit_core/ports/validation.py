"""IEntityValidator - pre-write entity validation protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..validation.result import ValidationResult


@runtime_checkable
class IEntityValidator(Protocol):
    """Protocol for entity validators used by ``create`` and ``insert``."""

    async def validate(self, entity: dict[str, Any]) -> ValidationResult:
        """Validate *entity* and return a
        :class:`~datakit_core.validation.result.ValidationResult`.
        """
        ...

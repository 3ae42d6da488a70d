"""Entity validation: ValidationResult and the bundled validators."""

from __future__ import annotations

from .result import ValidationResult
from .validators import CallableEntityValidator, PydanticEntityValidator

__all__ = [
    "CallableEntityValidator",
    "PydanticEntityValidator",
    "ValidationResult",
]

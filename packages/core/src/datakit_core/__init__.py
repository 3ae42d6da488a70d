"""datakit-core - Foundation package for the datakit data-access toolkit.

No storage-engine dependencies. Pydantic for settings and validation.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import MemoryAdapter

# ── Descriptor & settings ───────────────────────────────────────
from .descriptor import PARAM_ALIASES, FilterDescriptor
from .paths import MISSING, flatten, get_path, has_path, project, set_path, unset_path

# ── Ports ────────────────────────────────────────────────────────
from .ports import IActionCaller, IAdapter, ICacheService, IEntityValidator

# ── Primitives ───────────────────────────────────────────────────
from .primitives import (
    ActionNotFoundError,
    AdapterNotConnectedError,
    ClientError,
    ConfigurationError,
    DataKitError,
    EntityNotFoundError,
    InfrastructureError,
    InvalidParameterError,
    PersistenceError,
    ValidationError,
)
from .retry import RetryPolicy
from .settings import (
    ActionRule,
    CollectionSettings,
    HandlerRule,
    PopulationRule,
    normalize_rule,
    split_list,
)

# ── Validation ───────────────────────────────────────────────────
from .validation import (
    CallableEntityValidator,
    PydanticEntityValidator,
    ValidationResult,
)

__all__ = [
    # Adapters
    "MemoryAdapter",
    # Descriptor & settings
    "ActionRule",
    "CollectionSettings",
    "FilterDescriptor",
    "HandlerRule",
    "PARAM_ALIASES",
    "PopulationRule",
    "RetryPolicy",
    "normalize_rule",
    "split_list",
    # Paths
    "MISSING",
    "flatten",
    "get_path",
    "has_path",
    "project",
    "set_path",
    "unset_path",
    # Ports
    "IActionCaller",
    "IAdapter",
    "ICacheService",
    "IEntityValidator",
    # Primitives
    "ActionNotFoundError",
    "AdapterNotConnectedError",
    "ClientError",
    "ConfigurationError",
    "DataKitError",
    "EntityNotFoundError",
    "InfrastructureError",
    "InvalidParameterError",
    "PersistenceError",
    "ValidationError",
    # Validation
    "CallableEntityValidator",
    "PydanticEntityValidator",
    "ValidationResult",
]

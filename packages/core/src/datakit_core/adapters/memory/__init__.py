from .adapter import MemoryAdapter
from .matching import (
    MemoryOperator,
    MemoryOperatorRegistry,
    QueryMatcher,
    build_default_registry,
)

__all__ = [
    "MemoryAdapter",
    "MemoryOperator",
    "MemoryOperatorRegistry",
    "QueryMatcher",
    "build_default_registry",
]

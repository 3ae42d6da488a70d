from .memory import MemoryAdapter

__all__ = ["MemoryAdapter"]

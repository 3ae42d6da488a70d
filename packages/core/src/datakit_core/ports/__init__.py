from .adapter import IAdapter
from .cache import ICacheService
from .caller import IActionCaller
from .validation import IEntityValidator

__all__ = [
    "IActionCaller",
    "IAdapter",
    "ICacheService",
    "IEntityValidator",
]

from .base import Storage
from .database import DatabaseStorage
from .memory import MemoryStorage

__all__ = ["Storage", "DatabaseStorage", "MemoryStorage"]

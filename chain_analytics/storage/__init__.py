"""Storage backends: relational primary and in-memory fallback."""

from .base import StorageBackend
from .memory import InMemoryStore, InMemoryBackend
from .relational import RelationalBackend

__all__ = [
    "StorageBackend",
    "InMemoryStore",
    "InMemoryBackend",
    "RelationalBackend",
]

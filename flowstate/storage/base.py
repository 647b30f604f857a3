"""
Keyed store contract used by the core.

A store maps identifier -> entity. ``add`` is insert-if-absent, ``get``
treats absence as a normal outcome and ``exclusive`` serializes work on a
single key.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class KeyAlreadyExistsError(KeyError):
    """Raised when adding an entity under a key that is already taken."""
    
    def __init__(self, store: str, key: str):
        self.store = store
        self.key = key
        super().__init__(f"{store}: key '{key}' already exists")


class KeyedStore(ABC, Generic[T]):
    """Abstract identifier -> entity store."""
    
    @abstractmethod
    def add(self, key: str, item: T) -> None:
        """
        Register an entity.
        
        Raises:
            KeyAlreadyExistsError: If the key is already present
        """
        pass
    
    @abstractmethod
    def get(self, key: str) -> Optional[T]:
        """Get entity by key, None when absent."""
        pass
    
    @abstractmethod
    def contains(self, key: str) -> bool:
        """Check if the key is registered."""
        pass
    
    @abstractmethod
    def list_all(self) -> list[T]:
        """Snapshot list of all entities (no ordering guarantee)."""
        pass
    
    @abstractmethod
    def exclusive(self, key: str) -> AbstractContextManager[Optional[T]]:
        """
        Hold the per-key lock for the duration of the block.
        
        Yields the entity, or None when the key is absent.
        """
        pass

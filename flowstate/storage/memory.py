"""
Thread-safe in-memory keyed store.

Process-wide storage for definitions and instances. Nothing survives a
restart.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, TypeVar

from flowstate.storage.base import KeyAlreadyExistsError, KeyedStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InMemoryStore(KeyedStore[T]):
    """
    Dictionary-backed store guarded by locks.
    
    A store-wide lock protects the table itself (insert-if-absent, listing)
    and every key gets its own lock so work on distinct keys never contends.
    """
    
    def __init__(self, name: str = "store"):
        self.name = name
        self._items: dict[str, T] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()
    
    def add(self, key: str, item: T) -> None:
        with self._lock:
            if key in self._items:
                raise KeyAlreadyExistsError(self.name, key)
            self._items[key] = item
            self._key_locks[key] = threading.Lock()
        logger.debug(f"{self.name}: added {key}")
    
    def get(self, key: str) -> Optional[T]:
        with self._lock:
            return self._items.get(key)
    
    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._items
    
    def list_all(self) -> list[T]:
        with self._lock:
            return list(self._items.values())
    
    def keys(self) -> list[str]:
        with self._lock:
            return list(self._items.keys())
    
    @contextmanager
    def exclusive(self, key: str) -> Iterator[Optional[T]]:
        with self._lock:
            item = self._items.get(key)
            key_lock = self._key_locks.get(key)
        
        if key_lock is None:
            yield None
            return
        
        with key_lock:
            yield item
    
    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
    
    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains(key)

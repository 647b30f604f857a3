"""Storage layer for definitions and instances."""

from flowstate.storage.base import KeyAlreadyExistsError, KeyedStore
from flowstate.storage.memory import InMemoryStore

__all__ = ["KeyAlreadyExistsError", "KeyedStore", "InMemoryStore"]

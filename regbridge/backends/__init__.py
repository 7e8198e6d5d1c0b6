"""Adapters translating the canonical verbs to a concrete store.

- fake: callable-driven adapters, for tests
- memory: an in-process store with a TTL cache
- file: the memory store persisted as YAML
"""

from regbridge.backends.file import FileBackend
from regbridge.backends.memory import MemoryBackend

__all__ = ["FileBackend", "MemoryBackend"]

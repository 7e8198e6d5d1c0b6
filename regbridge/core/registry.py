"""The root of every operation: a generic service registry.

A ServiceRegistry abstracts the real service registry in use, so the same
code works regardless of the backend::

    sr = ServiceRegistry.from_memory()
    sr.namespace("sales").register(with_kv("env", "prod"))
    for ns, ns_op in sr.namespace(ANY).list():
        print(ns.name, ns.metadata)
"""

from __future__ import annotations

from pathlib import Path

from regbridge.core.adapters import RegistryBackend
from regbridge.core.namespaces import NamespaceOperation
from regbridge.errors import NoBackendProvided
from regbridge.options import apply_options
from regbridge.options.registry import RegistryOptions

# Signals the intention of operating on any object, e.g. for listing.
ANY = ""


class ServiceRegistry:
    """Entry point to the service registry. Read-only once built."""

    def __init__(self, backend: RegistryBackend):
        if backend is None:
            raise NoBackendProvided()
        self._backend = backend

    @property
    def backend(self) -> RegistryBackend:
        return self._backend

    @classmethod
    def from_backend(cls, backend: RegistryBackend) -> ServiceRegistry:
        """Wrap an already configured backend adapter."""
        return cls(backend)

    @classmethod
    def from_memory(cls, *opts) -> ServiceRegistry:
        """Start a service registry that only lives in this process."""
        from regbridge.backends.memory import MemoryBackend

        return cls(MemoryBackend(apply_options(RegistryOptions(), opts)))

    @classmethod
    def from_file(cls, directory: str | Path, *opts) -> ServiceRegistry:
        """Start a service registry persisted as YAML under ``directory``."""
        from regbridge.backends.file import FileBackend

        return cls(FileBackend(directory, apply_options(RegistryOptions(), opts)))

    def namespace(self, name: str) -> NamespaceOperation:
        """Start an operation on the namespace called ``name``."""
        return NamespaceOperation(
            name=name,
            adapter_op=self._backend.namespace(name),
            root=self,
        )

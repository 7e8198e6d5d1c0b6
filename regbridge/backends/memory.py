"""In-process backend, keeping the whole hierarchy in nested dicts.

The store looks like::

    {"namespaces": {
        "sales": {"metadata": {...}, "services": {
            "payroll": {"metadata": {...}, "endpoints": {
                "payroll-1": {"address": "10.0.0.1", "port": 80, "metadata": {...}},
            }},
        }},
    }}

Reads go through a ``TTLCache`` unless ``with_force_refresh()`` is given.
Subclasses can persist the store by overriding ``_load`` and ``_save``.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional

from regbridge import errors
from regbridge.backends.cache import TTLCache
from regbridge.models import Endpoint, Namespace, ResourceKind, Service
from regbridge.options.get import GetOptions
from regbridge.options.listing import ListOptions
from regbridge.options.registry import RegistryOptions

logger = logging.getLogger(__name__)

LEVELS = (ResourceKind.NAMESPACE, ResourceKind.SERVICE, ResourceKind.ENDPOINT)

_NOT_FOUND = {
    ResourceKind.NAMESPACE: errors.NamespaceNotFound,
    ResourceKind.SERVICE: errors.ServiceNotFound,
    ResourceKind.ENDPOINT: errors.EndpointNotFound,
}

_ALREADY_EXISTS = {
    ResourceKind.NAMESPACE: errors.NamespaceAlreadyExists,
    ResourceKind.SERVICE: errors.ServiceAlreadyExists,
    ResourceKind.ENDPOINT: errors.EndpointAlreadyExists,
}


def cache_key(names: tuple[str, ...]) -> str:
    return "/".join(f"{LEVELS[i].path_segment}/{name}" for i, name in enumerate(names))


class MemoryBackend:
    """Keeps namespaces, services and endpoints in memory.

    Children can only be written inside existing parents, and deleting a
    parent deletes everything below it.
    """

    def __init__(self, options: Optional[RegistryOptions] = None):
        options = options or RegistryOptions()
        self.options = options
        self.cache = TTLCache(options.cache_expiration_time, options.cache_cleanup_time)
        self._data: dict = {ResourceKind.NAMESPACE.path_segment: {}}

    def namespace(self, name: str) -> MemoryNamespaceAdapter:
        return MemoryNamespaceAdapter(self, (name,))

    # ------------------------------------------------------------------
    # Persistence hooks
    # ------------------------------------------------------------------

    def _load(self) -> None:
        """Refresh the store before an operation."""

    def _save(self) -> None:
        """Persist the store after a mutation."""

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    def collection(self, parents: tuple[str, ...]) -> dict:
        """Return the children of the object at ``parents``.

        Raises the NotFound error of the first missing ancestor.
        """
        node = self._data
        for depth, name in enumerate(parents):
            child = node[LEVELS[depth].path_segment].get(name)
            if child is None:
                raise _NOT_FOUND[LEVELS[depth]]()
            node = child
        return node.setdefault(LEVELS[len(parents)].path_segment, {})

    def record(self, names: tuple[str, ...], node: dict):
        kind = LEVELS[len(names) - 1]
        raw = {k: copy.deepcopy(v) for k, v in node.items() if k not in ("services", "endpoints")}
        metadata = dict(node.get("metadata") or {})

        if kind == ResourceKind.NAMESPACE:
            return Namespace(name=names[0], metadata=metadata, original_object=raw)
        if kind == ResourceKind.SERVICE:
            return Service(name=names[1], namespace=names[0], metadata=metadata, original_object=raw)
        return Endpoint(
            name=names[2],
            service=names[1],
            namespace=names[0],
            address=node.get("address") or "",
            port=int(node.get("port") or 0),
            metadata=metadata,
            original_object=raw,
        )

    def adapter(self, names: tuple[str, ...]):
        return _ADAPTERS[len(names) - 1](self, names)


class _MemoryAdapter:
    kind: ResourceKind

    def __init__(self, backend: MemoryBackend, names: tuple[str, ...]):
        self._backend = backend
        self._names = names
        self._key = cache_key(names)

    @property
    def name(self) -> str:
        return self._names[-1]

    def get(self, ctx: Any, opts: GetOptions):
        if not opts.force_refresh:
            cached = self._backend.cache.get(self._key)
            if cached is not None:
                return cached.clone()

        self._backend._load()
        node = self._backend.collection(self._names[:-1]).get(self.name)
        if node is None:
            raise _NOT_FOUND[self.kind]()

        record = self._backend.record(self._names, node)
        self._backend.cache.put(self._key, record.clone())
        return record

    def delete(self, ctx: Any) -> None:
        self._backend._load()
        siblings = self._backend.collection(self._names[:-1])
        if self.name not in siblings:
            raise _NOT_FOUND[self.kind]()

        del siblings[self.name]
        self._backend._save()
        self._backend.cache.delete_prefix(self._key)
        logger.debug("deleted %s", self._key)

    def list(self, opts: ListOptions) -> MemoryCursor:
        return MemoryCursor(self._backend, self._names[:-1], opts, only=self.name)

    def _write(self, create: bool, fields: dict):
        self._backend._load()
        siblings = self._backend.collection(self._names[:-1])
        node = siblings.get(self.name)

        if create:
            if node is not None:
                raise _ALREADY_EXISTS[self.kind]()
            node = siblings[self.name] = {}
        elif node is None:
            raise _NOT_FOUND[self.kind]()

        node.update(copy.deepcopy(fields))
        self._backend._save()

        record = self._backend.record(self._names, node)
        self._backend.cache.put(self._key, record.clone())
        return record


class MemoryEndpointAdapter(_MemoryAdapter):
    kind = ResourceKind.ENDPOINT

    def create(self, ctx: Any, address: str, port: int, metadata: dict[str, str]) -> Endpoint:
        return self._write(True, {"address": address, "port": port, "metadata": metadata})

    def update(self, ctx: Any, address: str, port: int, metadata: dict[str, str]) -> Endpoint:
        return self._write(False, {"address": address, "port": port, "metadata": metadata})


class MemoryServiceAdapter(_MemoryAdapter):
    kind = ResourceKind.SERVICE

    def create(self, ctx: Any, metadata: dict[str, str]) -> Service:
        return self._write(True, {"metadata": metadata})

    def update(self, ctx: Any, metadata: dict[str, str]) -> Service:
        return self._write(False, {"metadata": metadata})

    def endpoint(self, name: str) -> MemoryEndpointAdapter:
        return MemoryEndpointAdapter(self._backend, self._names + (name,))


class MemoryNamespaceAdapter(_MemoryAdapter):
    kind = ResourceKind.NAMESPACE

    def create(self, ctx: Any, metadata: dict[str, str]) -> Namespace:
        return self._write(True, {"metadata": metadata})

    def update(self, ctx: Any, metadata: dict[str, str]) -> Namespace:
        return self._write(False, {"metadata": metadata})

    def service(self, name: str) -> MemoryServiceAdapter:
        return MemoryServiceAdapter(self._backend, self._names + (name,))


_ADAPTERS = (MemoryNamespaceAdapter, MemoryServiceAdapter, MemoryEndpointAdapter)


class MemoryCursor:
    """Pages through the children of ``parents`` in name order.

    Each page holds up to ``opts.results`` objects, and is pulled only once
    the previous one has been consumed. Objects failing the filters are
    skipped, the others are cached on the way out.
    """

    def __init__(self, backend: MemoryBackend, parents: tuple[str, ...], opts: ListOptions, only: str = ""):
        self._backend = backend
        self._parents = parents
        self._opts = opts
        self._only = only
        self._page: list = []
        self._last_name: Optional[str] = None
        self._exhausted = False
        self.pages = 0

    def next(self, ctx: Any):
        while True:
            while self._page:
                record = self._page.pop(0)
                if not self._opts.filter(record):
                    continue
                names = self._parents + (record.name,)
                self._backend.cache.put(cache_key(names), record.clone())
                return record, self._backend.adapter(names)

            if self._exhausted:
                raise errors.IteratorDone()
            self._fetch_page()

    def _fetch_page(self) -> None:
        self._backend._load()
        children = self._backend.collection(self._parents)

        names = sorted(
            name
            for name in children
            if (self._last_name is None or name > self._last_name)
            and (not self._only or name == self._only)
        )
        page = names[: self._opts.results]
        self.pages += 1
        if len(names) <= self._opts.results:
            self._exhausted = True
        if page:
            self._last_name = page[-1]

        self._page = [
            self._backend.record(self._parents + (name,), children[name]) for name in page
        ]

"""Fake adapters whose behavior is set through plain callables.

Every verb defaults to something sensible (Get raises not found, writes
succeed, lists are empty) and every call is recorded in ``calls``, so
tests can both steer the backend and check what the core asked of it::

    ep = FakeEndpointAdapter(get=lambda ctx, opts: Endpoint("a", "svc", "ns"))
    sr = ServiceRegistry.from_backend(FakeBackend.with_endpoint(ep))
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Tuple

from regbridge.errors import (
    EndpointNotFound,
    IteratorDone,
    NamespaceNotFound,
    ServiceNotFound,
)


class FakeCursor:
    """A cursor returning the given ``(record, adapter)`` pairs in order."""

    def __init__(self, items: Iterable[Tuple[Any, Any]] = (), next: Optional[Callable] = None):
        self._items = list(items)
        self._next = next
        self.calls = 0

    def next(self, ctx: Any):
        self.calls += 1
        if self._next is not None:
            return self._next(ctx)
        if not self._items:
            raise IteratorDone()
        return self._items.pop(0)


class _FakeAdapter:
    not_found = NamespaceNotFound

    def __init__(self, get=None, create=None, update=None, delete=None, list=None):
        self._get = get
        self._create = create
        self._update = update
        self._delete = delete
        self._list = list
        self.calls: list[tuple] = []

    def called(self, verb: str) -> int:
        """Return how many times ``verb`` was called."""
        return sum(1 for call in self.calls if call[0] == verb)

    def get(self, ctx, opts):
        self.calls.append(("get", opts))
        if self._get is None:
            raise self.not_found()
        return self._get(ctx, opts)

    def delete(self, ctx):
        self.calls.append(("delete",))
        if self._delete is not None:
            self._delete(ctx)

    def list(self, opts):
        self.calls.append(("list", opts))
        if self._list is None:
            return FakeCursor()
        return self._list(opts)


class FakeEndpointAdapter(_FakeAdapter):
    not_found = EndpointNotFound

    def create(self, ctx, address, port, metadata):
        self.calls.append(("create", address, port, metadata))
        if self._create is not None:
            return self._create(ctx, address, port, metadata)

    def update(self, ctx, address, port, metadata):
        self.calls.append(("update", address, port, metadata))
        if self._update is not None:
            return self._update(ctx, address, port, metadata)


class FakeServiceAdapter(_FakeAdapter):
    not_found = ServiceNotFound

    def __init__(self, endpoint: Optional[Callable[[str], Any]] = None, **verbs):
        super().__init__(**verbs)
        self._endpoint = endpoint
        self.endpoints: dict[str, Any] = {}

    def create(self, ctx, metadata):
        self.calls.append(("create", metadata))
        if self._create is not None:
            return self._create(ctx, metadata)

    def update(self, ctx, metadata):
        self.calls.append(("update", metadata))
        if self._update is not None:
            return self._update(ctx, metadata)

    def endpoint(self, name: str):
        adapter = self._endpoint(name) if self._endpoint else FakeEndpointAdapter()
        self.endpoints[name] = adapter
        return adapter


class FakeNamespaceAdapter(_FakeAdapter):
    def __init__(self, service: Optional[Callable[[str], Any]] = None, **verbs):
        super().__init__(**verbs)
        self._service = service
        self.services: dict[str, Any] = {}

    def create(self, ctx, metadata):
        self.calls.append(("create", metadata))
        if self._create is not None:
            return self._create(ctx, metadata)

    def update(self, ctx, metadata):
        self.calls.append(("update", metadata))
        if self._update is not None:
            return self._update(ctx, metadata)

    def service(self, name: str):
        adapter = self._service(name) if self._service else FakeServiceAdapter()
        self.services[name] = adapter
        return adapter


class FakeBackend:
    def __init__(self, namespace: Optional[Callable[[str], Any]] = None):
        self._namespace = namespace
        self.namespaces: dict[str, Any] = {}

    @classmethod
    def with_namespace(cls, adapter: FakeNamespaceAdapter) -> FakeBackend:
        """Serve ``adapter`` whatever the namespace name."""
        return cls(namespace=lambda name: adapter)

    @classmethod
    def with_service(cls, adapter: FakeServiceAdapter) -> FakeBackend:
        return cls.with_namespace(FakeNamespaceAdapter(service=lambda name: adapter))

    @classmethod
    def with_endpoint(cls, adapter: FakeEndpointAdapter) -> FakeBackend:
        return cls.with_service(FakeServiceAdapter(endpoint=lambda name: adapter))

    def namespace(self, name: str):
        adapter = self._namespace(name) if self._namespace else FakeNamespaceAdapter()
        self.namespaces[name] = adapter
        return adapter

"""Backend adapter contract.

A backend translates the canonical verbs into the native API of a specific
service registry. The core never talks to a service registry directly: it
only consumes these protocols. ``ctx`` is whatever the caller passed to the
verb and is forwarded untouched, so deadlines and cancellation are the
backend's business.
"""

from __future__ import annotations

from typing import Any, Protocol, Tuple

from regbridge.models import Endpoint, Namespace, Service
from regbridge.options.get import GetOptions
from regbridge.options.listing import ListOptions


class NamespaceCursor(Protocol):
    def next(self, ctx: Any) -> Tuple[Namespace, "NamespaceAdapter"]:
        """Return the next namespace passing the filters, or raise IteratorDone."""
        ...


class ServiceCursor(Protocol):
    def next(self, ctx: Any) -> Tuple[Service, "ServiceAdapter"]:
        ...


class EndpointCursor(Protocol):
    def next(self, ctx: Any) -> Tuple[Endpoint, "EndpointAdapter"]:
        ...


class EndpointAdapter(Protocol):
    def get(self, ctx: Any, opts: GetOptions) -> Endpoint:
        ...

    def create(self, ctx: Any, address: str, port: int, metadata: dict[str, str]) -> Endpoint:
        ...

    def update(self, ctx: Any, address: str, port: int, metadata: dict[str, str]) -> Endpoint:
        ...

    def delete(self, ctx: Any) -> None:
        ...

    def list(self, opts: ListOptions) -> EndpointCursor:
        ...


class ServiceAdapter(Protocol):
    def get(self, ctx: Any, opts: GetOptions) -> Service:
        ...

    def create(self, ctx: Any, metadata: dict[str, str]) -> Service:
        ...

    def update(self, ctx: Any, metadata: dict[str, str]) -> Service:
        ...

    def delete(self, ctx: Any) -> None:
        ...

    def list(self, opts: ListOptions) -> ServiceCursor:
        ...

    def endpoint(self, name: str) -> EndpointAdapter:
        ...


class NamespaceAdapter(Protocol):
    def get(self, ctx: Any, opts: GetOptions) -> Namespace:
        ...

    def create(self, ctx: Any, metadata: dict[str, str]) -> Namespace:
        ...

    def update(self, ctx: Any, metadata: dict[str, str]) -> Namespace:
        ...

    def delete(self, ctx: Any) -> None:
        ...

    def list(self, opts: ListOptions) -> NamespaceCursor:
        ...

    def service(self, name: str) -> ServiceAdapter:
        ...


class RegistryBackend(Protocol):
    def namespace(self, name: str) -> NamespaceAdapter:
        ...

"""Operations on services, which live inside a namespace."""

from __future__ import annotations

from typing import Any

from regbridge.core.endpoints import EndpointOperation
from regbridge.core.operation import ResourceOperation
from regbridge.errors import EmptyServiceName
from regbridge.models import ResourceKind, Service


class ServiceOperation(ResourceOperation):
    """Get, register, deregister or list services of a namespace.

    Services can only be listed inside a named namespace::

        for svc, svc_op in sr.namespace("sales").service(ANY).list():
            ...
    """

    kind = ResourceKind.SERVICE
    empty_name_error = EmptyServiceName

    def endpoint(self, name: str) -> EndpointOperation:
        """Start an operation on an endpoint of this service."""
        return EndpointOperation(
            name=name,
            adapter_op=self._adapter_op.endpoint(name) if self._adapter_op is not None else None,
            parent=self,
            root=self._root,
        )

    def _sibling(self, name: str) -> ServiceOperation:
        return self._parent.service(name)

    def _build_record(self, reg_opts, existing, metadata: dict[str, str]) -> Service:
        return Service(name=self._name, namespace=self._parent.name, metadata=metadata)

    def _create(self, ctx: Any, record: Service) -> None:
        self._adapter_op.create(ctx, record.metadata)

    def _update(self, ctx: Any, record: Service) -> None:
        self._adapter_op.update(ctx, record.metadata)

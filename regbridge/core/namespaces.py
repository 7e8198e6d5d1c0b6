"""Operations on namespaces, the top level of the hierarchy."""

from __future__ import annotations

from typing import Any

from regbridge.core.operation import ResourceOperation
from regbridge.core.services import ServiceOperation
from regbridge.errors import EmptyNamespaceName
from regbridge.models import Namespace, ResourceKind


class NamespaceOperation(ResourceOperation):
    """Get, register, deregister or list namespaces.

    Don't build this directly, use ``ServiceRegistry.namespace()``::

        ns = sr.namespace("sales").get()
    """

    kind = ResourceKind.NAMESPACE
    empty_name_error = EmptyNamespaceName

    def service(self, name: str) -> ServiceOperation:
        """Start an operation on a service of this namespace."""
        return ServiceOperation(
            name=name,
            adapter_op=self._adapter_op.service(name) if self._adapter_op is not None else None,
            parent=self,
            root=self._root,
        )

    def _sibling(self, name: str) -> NamespaceOperation:
        return self._root.namespace(name)

    def _build_record(self, reg_opts, existing, metadata: dict[str, str]) -> Namespace:
        return Namespace(name=self._name, metadata=metadata)

    def _create(self, ctx: Any, record: Namespace) -> None:
        self._adapter_op.create(ctx, record.metadata)

    def _update(self, ctx: Any, record: Namespace) -> None:
        self._adapter_op.update(ctx, record.metadata)

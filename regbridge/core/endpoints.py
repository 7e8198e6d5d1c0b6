"""Operations on endpoints, the leaves of the hierarchy."""

from __future__ import annotations

import logging
from typing import Any

from regbridge.core.operation import ResourceOperation, join_path
from regbridge.core.resolver import generate_random_name, resolve_value
from regbridge.errors import EmptyEndpointName
from regbridge.models import Endpoint, ResourceKind
from regbridge.options.register import RegisterMode, RegisterOptions

logger = logging.getLogger(__name__)


class EndpointOperation(ResourceOperation):
    """Get, register, deregister or list endpoints of a service.

    An endpoint can be registered without a name as long as
    ``with_generate_name()`` is given: a name is then generated from the
    parent service's name and the operation is bound to it::

        ep = sr.namespace("hr").service("payroll").endpoint(ANY)
        ep.register(with_address("10.10.10.22"), with_port(9876), with_generate_name())
        print(ep.name)  # payroll-ab78ss02
    """

    kind = ResourceKind.ENDPOINT
    empty_name_error = EmptyEndpointName

    def _check_register_names(self) -> None:
        # The name may still be generated.
        self._parent._check_names()

    def _prepare_register(self, reg_opts: RegisterOptions) -> None:
        if self._name:
            return

        if not reg_opts.generate_name or reg_opts.mode == RegisterMode.UPDATE:
            raise EmptyEndpointName()

        name = generate_random_name(self._parent.name)
        logger.debug("generated endpoint name %s", name)
        self._name = name
        self._path = join_path(self._parent.path, self.kind, name)
        self._adapter_op = self._parent._adapter_op.endpoint(name)

    def _sibling(self, name: str) -> EndpointOperation:
        return self._parent.endpoint(name)

    def _build_record(self, reg_opts: RegisterOptions, existing, metadata: dict[str, str]) -> Endpoint:
        return Endpoint(
            name=self._name,
            service=self._parent.name,
            namespace=self._parent.parent.name,
            address=resolve_value(reg_opts.address, existing.address if existing else None, ""),
            port=resolve_value(reg_opts.port, existing.port if existing else None, 0),
            metadata=metadata,
        )

    def _create(self, ctx: Any, record: Endpoint) -> None:
        self._adapter_op.create(ctx, record.address, record.port, record.metadata)

    def _update(self, ctx: Any, record: Endpoint) -> None:
        self._adapter_op.update(ctx, record.address, record.port, record.metadata)

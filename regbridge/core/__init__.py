"""Core — hierarchical operations over any service registry backend.

The core provides:
- Handles: namespace, service and endpoint operations with the same verbs
- Register resolution: create vs update, metadata merge, no-op suppression
- Iterators: lazy, filtered and paginated List results
"""

from regbridge.core.endpoints import EndpointOperation
from regbridge.core.iterator import ResultIterator
from regbridge.core.namespaces import NamespaceOperation
from regbridge.core.registry import ANY, ServiceRegistry
from regbridge.core.services import ServiceOperation

__all__ = [
    "ANY",
    "EndpointOperation",
    "NamespaceOperation",
    "ResultIterator",
    "ServiceOperation",
    "ServiceRegistry",
]

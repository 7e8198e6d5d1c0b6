"""Resource records, the objects returned by Get and List.

Records are snapshots of what is stored on the service registry and carry
no behaviour beyond comparison and (de)serialization. ``original_object``
holds the backend's own representation for callers that need data not
covered here; it never takes part in comparisons.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ResourceKind(Enum):
    """The three levels of the service registry hierarchy."""

    NAMESPACE = "namespaces"
    SERVICE = "services"
    ENDPOINT = "endpoints"

    @property
    def path_segment(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.name.lower()


def deep_copy_metadata(metadata: dict[str, str] | None) -> dict[str, str]:
    return dict(metadata) if metadata else {}


@dataclass
class Namespace:
    """A group that contains different services/applications."""

    name: str
    metadata: dict[str, str] = field(default_factory=dict)
    original_object: Any = field(default=None, compare=False, repr=False)

    kind = ResourceKind.NAMESPACE

    def deep_equal_to(self, other: Namespace | None) -> bool:
        """Compare names and metadata, ignoring ``original_object``."""
        if other is None:
            return False
        return self.name == other.name and self.metadata == other.metadata

    def clone(self) -> Namespace:
        return Namespace(
            name=self.name,
            metadata=deep_copy_metadata(self.metadata),
            original_object=self.original_object,
        )

    def to_dict(self) -> dict:
        return {"name": self.name, "metadata": dict(self.metadata)}

    @classmethod
    def from_dict(cls, data: dict) -> Namespace:
        return cls(name=data["name"], metadata=data.get("metadata") or {})


@dataclass
class Service:
    """An application, living inside a namespace."""

    name: str
    namespace: str
    metadata: dict[str, str] = field(default_factory=dict)
    original_object: Any = field(default=None, compare=False, repr=False)

    kind = ResourceKind.SERVICE

    def deep_equal_to(self, other: Service | None) -> bool:
        if other is None:
            return False
        return (
            self.name == other.name
            and self.namespace == other.namespace
            and self.metadata == other.metadata
        )

    def clone(self) -> Service:
        return Service(
            name=self.name,
            namespace=self.namespace,
            metadata=deep_copy_metadata(self.metadata),
            original_object=self.original_object,
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "namespace": self.namespace,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Service:
        return cls(
            name=data["name"],
            namespace=data.get("namespace", ""),
            metadata=data.get("metadata") or {},
        )


@dataclass
class Endpoint:
    """The address:port combination where a service can be reached.

    An empty address or a zero port can be read as "not known yet".
    """

    name: str
    service: str
    namespace: str
    address: str = ""
    port: int = 0
    metadata: dict[str, str] = field(default_factory=dict)
    original_object: Any = field(default=None, compare=False, repr=False)

    kind = ResourceKind.ENDPOINT

    def deep_equal_to(self, other: Endpoint | None) -> bool:
        """Two endpoints are equal when every field but ``original_object`` matches."""
        if other is None:
            return False
        return (
            self.name == other.name
            and self.namespace == other.namespace
            and self.service == other.service
            and self.address == other.address
            and self.port == other.port
            and self.metadata == other.metadata
        )

    def clone(self) -> Endpoint:
        return Endpoint(
            name=self.name,
            service=self.service,
            namespace=self.namespace,
            address=self.address,
            port=self.port,
            metadata=deep_copy_metadata(self.metadata),
            original_object=self.original_object,
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "namespace": self.namespace,
            "service": self.service,
            "address": self.address,
            "port": self.port,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Endpoint:
        return cls(
            name=data["name"],
            service=data.get("service", ""),
            namespace=data.get("namespace", ""),
            address=data.get("address") or "",
            port=int(data.get("port") or 0),
            metadata=data.get("metadata") or {},
        )

"""Options for the List operation, and the filters they build.

Filters are evaluated by the backend cursors through ``ListOptions.filter``
so that every backend applies exactly the same semantics, whether or not it
can filter natively.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from enum import Enum

from regbridge.errors import (
    EmptyMetadataKey,
    EmptyMetadataKeysFilter,
    EmptyNameInFilter,
    IncompatibleAddressFilters,
    IncompatibleMetadataFilters,
    IncompatibleNameFilters,
    InvalidCIDR,
    InvalidNamePrefixFilter,
    InvalidPort,
    InvalidPortRange,
    InvalidResultsNumber,
    NoOptionsProvided,
    NoPortsProvided,
)
from regbridge.models import Endpoint, Namespace, Service

# Number of results to pull per page unless overridden.
DEFAULT_LIST_RESULTS_NUMBER = 50

MAX_PORT_NUMBER = 65535


class AddressFamily(Enum):
    ANY = 0
    IPV4 = 4
    IPV6 = 6


@dataclass
class NameFilters:
    # Names of the objects to get. Cannot be used together with prefix.
    names_in: list[str] = field(default_factory=list)
    prefix: str = ""


@dataclass
class MetadataFilters:
    # Objects with no metadata at all. Cannot be used with ``metadata``.
    no_metadata: bool = False
    # Keys the object must have; a non-empty value must also match.
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class AddressFilters:
    cidr: str = ""
    family: AddressFamily = AddressFamily.ANY


@dataclass
class PortFilters:
    ports_in: list[int] = field(default_factory=list)
    # Inclusive (start, end) pairs.
    ranges: list[tuple[int, int]] = field(default_factory=list)


@dataclass
class ListOptions:
    results: int = DEFAULT_LIST_RESULTS_NUMBER
    name_filters: NameFilters | None = None
    metadata_filters: MetadataFilters | None = None
    address_filters: AddressFilters | None = None
    port_filters: PortFilters | None = None

    def filter(self, record: Namespace | Service | Endpoint) -> bool:
        """Return True if the record passes all the filters.

        Address and port filters only apply to endpoints.
        """
        if self.name_filters is not None:
            nf = self.name_filters
            if nf.names_in and record.name not in nf.names_in:
                return False
            if nf.prefix and not record.name.startswith(nf.prefix):
                return False

        if self.metadata_filters is not None:
            mf = self.metadata_filters
            if mf.no_metadata and record.metadata:
                return False
            if mf.metadata and not _metadata_matches(record.metadata, mf.metadata):
                return False

        if isinstance(record, Endpoint):
            if self.address_filters is not None:
                af = self.address_filters
                if af.cidr and not _inside_cidr(af.cidr, record.address):
                    return False
                if af.family != AddressFamily.ANY and _ip_version(record.address) != af.family.value:
                    return False

            if self.port_filters is not None:
                pf = self.port_filters
                if pf.ports_in and record.port != 0 and record.port not in pf.ports_in:
                    return False
                if pf.ranges and not any(start <= record.port <= end for start, end in pf.ranges):
                    return False

        return True


def _metadata_matches(metadata: dict[str, str], needle: dict[str, str]) -> bool:
    for key, value in needle.items():
        if key not in metadata:
            return False
        if value != "" and metadata[key] != value:
            return False
    return True


def _ip_version(address: str) -> int | None:
    try:
        return ipaddress.ip_address(address).version
    except ValueError:
        return None


def _inside_cidr(cidr: str, address: str) -> bool:
    # The CIDR was validated when the option was applied.
    network = ipaddress.ip_network(cidr, strict=False)
    try:
        return ipaddress.ip_address(address) in network
    except ValueError:
        return False


def _require(opts: ListOptions | None) -> ListOptions:
    if opts is None:
        raise NoOptionsProvided()
    return opts


# ── Names ────────────────────────────────────────────────────────────


def with_name_in(*names: str):
    """Only retrieve objects with the given names. Appends across calls.

    Calling this with no names is an error, not "no filter".

    Example::

        sr.namespace(ANY).list(with_name_in("sales", "it", "hr"))
    """

    def _apply(opts: ListOptions | None) -> None:
        opts = _require(opts)
        if not names:
            raise EmptyNameInFilter()
        if opts.name_filters is None:
            opts.name_filters = NameFilters()
        if opts.name_filters.prefix:
            raise IncompatibleNameFilters()
        opts.name_filters.names_in.extend(names)

    return _apply


def with_name_prefix(prefix: str):
    """Only retrieve objects whose name starts with ``prefix``."""

    def _apply(opts: ListOptions | None) -> None:
        opts = _require(opts)
        if prefix == "":
            raise InvalidNamePrefixFilter()
        if opts.name_filters is None:
            opts.name_filters = NameFilters()
        if opts.name_filters.names_in:
            raise IncompatibleNameFilters()
        opts.name_filters.prefix = prefix

    return _apply


# ── Metadata ─────────────────────────────────────────────────────────


def with_metadata(metadata: dict[str, str]):
    """Only retrieve objects with the provided metadata.

    Use an empty value for keys whose value you don't care about. In case
    of duplicate keys across calls, the last one wins.
    """

    def _apply(opts: ListOptions | None) -> None:
        opts = _require(opts)
        if opts.metadata_filters is None:
            opts.metadata_filters = MetadataFilters()
        if opts.metadata_filters.no_metadata:
            raise IncompatibleMetadataFilters()
        if any(key == "" for key in metadata):
            raise EmptyMetadataKey()
        opts.metadata_filters.metadata.update(metadata)

    return _apply


def with_metadata_key_value(key: str, value: str):
    return with_metadata({key: value})


def with_kv(key: str, value: str):
    return with_metadata_key_value(key, value)


def with_metadata_keys(*keys: str):
    """Only retrieve objects having all the given keys, whatever their value."""

    def _apply(opts: ListOptions | None) -> None:
        if not keys:
            raise EmptyMetadataKeysFilter()
        with_metadata({key: "" for key in keys})(opts)

    return _apply


def with_no_metadata():
    """Only retrieve objects with no metadata at all."""

    def _apply(opts: ListOptions | None) -> None:
        opts = _require(opts)
        if opts.metadata_filters is None:
            opts.metadata_filters = MetadataFilters()
        if opts.metadata_filters.metadata:
            raise IncompatibleMetadataFilters()
        opts.metadata_filters.no_metadata = True

    return _apply


# ── Pagination ───────────────────────────────────────────────────────


def with_results_number(number: int):
    """Number of objects to pull from the service registry per page."""

    def _apply(opts: ListOptions | None) -> None:
        opts = _require(opts)
        if number <= 0:
            raise InvalidResultsNumber()
        opts.results = number

    return _apply


# ── Endpoints ────────────────────────────────────────────────────────


def with_cidr(cidr: str):
    """Only retrieve endpoints with an address inside the given network.

    Example::

        svc.endpoint(ANY).list(with_cidr("10.10.10.0/24"))
    """

    def _apply(opts: ListOptions | None) -> None:
        opts = _require(opts)
        # A bare address is not a network block.
        if "/" not in cidr:
            raise InvalidCIDR(f"invalid CIDR provided: {cidr!r}")
        try:
            ipaddress.ip_network(cidr, strict=False)
        except ValueError as e:
            raise InvalidCIDR(f"invalid CIDR provided: {cidr!r}") from e
        if opts.address_filters is None:
            opts.address_filters = AddressFilters()
        if opts.address_filters.family != AddressFamily.ANY:
            raise IncompatibleAddressFilters()
        opts.address_filters.cidr = cidr

    return _apply


def _with_family(family: AddressFamily):
    def _apply(opts: ListOptions | None) -> None:
        opts = _require(opts)
        if opts.address_filters is None:
            opts.address_filters = AddressFilters()
        if opts.address_filters.cidr:
            raise IncompatibleAddressFilters()
        opts.address_filters.family = family

    return _apply


def with_ipv4_only():
    """Only retrieve endpoints with an IPv4 address."""
    return _with_family(AddressFamily.IPV4)


def with_ipv6_only():
    """Only retrieve endpoints with an IPv6 address."""
    return _with_family(AddressFamily.IPV6)


def with_port_in(*ports: int):
    """Only retrieve endpoints whose port is one of ``ports``.

    Endpoints with no port (0) are always included.
    """

    def _apply(opts: ListOptions | None) -> None:
        opts = _require(opts)
        if not ports:
            raise NoPortsProvided()
        for port in ports:
            if port < 0 or port > MAX_PORT_NUMBER:
                raise InvalidPort(f"invalid port ({port}) provided")
        if opts.port_filters is None:
            opts.port_filters = PortFilters()
        for port in ports:
            if port not in opts.port_filters.ports_in:
                opts.port_filters.ports_in.append(port)

    return _apply


def with_port_range(start: int, end: int):
    """Only retrieve endpoints with a port between ``start`` and ``end``, included."""

    def _apply(opts: ListOptions | None) -> None:
        opts = _require(opts)
        if start > end or start < 0 or end > MAX_PORT_NUMBER:
            raise InvalidPortRange(f"invalid range ({start}-{end}) provided")
        if opts.port_filters is None:
            opts.port_filters = PortFilters()
        if (start, end) not in opts.port_filters.ranges:
            opts.port_filters.ranges.append((start, end))

    return _apply

"""Options for the Register operation.

Register creates the object when it does not exist and updates it
otherwise, unless a mode says differently:

- ``RegisterMode.CREATE_OR_UPDATE`` (the default)
- ``RegisterMode.CREATE``: fail if the object already exists
- ``RegisterMode.UPDATE``: fail if the object does not exist

Address and port only apply to endpoints and are ignored elsewhere.
``None`` means "not specified": on update the stored value is kept, on
create the empty value is registered.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from regbridge.errors import (
    EmptyMetadataKey,
    InvalidAddress,
    InvalidPort,
    NoOptionsProvided,
)

MIN_PORT_NUMBER = 1
MAX_PORT_NUMBER = 65535


class RegisterMode(Enum):
    CREATE_OR_UPDATE = "create_or_update"
    CREATE = "create"
    UPDATE = "update"


@dataclass
class RegisterOptions:
    mode: RegisterMode = RegisterMode.CREATE_OR_UPDATE
    metadata: dict[str, str] = field(default_factory=dict)
    # Drop every stored key not present in ``metadata``.
    replace_metadata: bool = False
    address: Optional[str] = None
    port: Optional[int] = None
    generate_name: bool = False


def _require(opts: RegisterOptions | None) -> RegisterOptions:
    if opts is None:
        raise NoOptionsProvided()
    return opts


def with_create_mode():
    """Only create the resource, and fail if it already exists."""

    def _apply(opts: RegisterOptions | None) -> None:
        _require(opts).mode = RegisterMode.CREATE

    return _apply


def with_update_mode():
    """Only update the resource, and fail if it does not exist."""

    def _apply(opts: RegisterOptions | None) -> None:
        _require(opts).mode = RegisterMode.UPDATE

    return _apply


def with_metadata(metadata: dict[str, str]):
    """Register the provided metadata with the resource.

    If the resource already exists, each key-value is added to (or replaces)
    the ones already registered and all the others are kept. Use
    ``with_replace_metadata()`` to drop the others.

    Example::

        sr.namespace("hr").service("payroll").register(
            with_metadata({"commit": "adf6h45bc", "maintainer": "john.smith"}))
    """

    def _apply(opts: RegisterOptions | None) -> None:
        opts = _require(opts)

        # Check every key before touching the options.
        if any(key == "" for key in metadata):
            raise EmptyMetadataKey()

        opts.metadata.update(metadata)

    return _apply


def with_metadata_key_value(key: str, value: str):
    """Shortcut for ``with_metadata`` with a single key-value."""
    return with_metadata({key: value})


def with_kv(key: str, value: str):
    """Shortcut for ``with_metadata_key_value``."""
    return with_metadata_key_value(key, value)


def with_replace_metadata():
    """Replace all existing metadata with the provided ones."""

    def _apply(opts: RegisterOptions | None) -> None:
        _require(opts).replace_metadata = True

    return _apply


def with_address(address: str):
    """Register the provided IPv4 or IPv6 address with the endpoint.

    An empty string is accepted and stores an empty address.
    """

    def _apply(opts: RegisterOptions | None) -> None:
        opts = _require(opts)
        if address != "":
            try:
                ipaddress.ip_address(address)
            except ValueError as e:
                raise InvalidAddress(f"invalid address provided: {address!r}") from e
        opts.address = address

    return _apply


def with_port(port: int):
    """Register the provided port with the endpoint. 0 stores an empty port."""

    def _apply(opts: RegisterOptions | None) -> None:
        opts = _require(opts)
        if port != 0 and not MIN_PORT_NUMBER <= port <= MAX_PORT_NUMBER:
            raise InvalidPort(f"invalid port ({port}) provided")
        opts.port = port

    return _apply


def with_generate_name():
    """Generate a name for an unnamed endpoint, starting from its service's name.

    Ignored for namespaces, services and named endpoints; fails together
    with ``with_update_mode()``. The result resembles ``payroll-ab78ss02``.
    """

    def _apply(opts: RegisterOptions | None) -> None:
        _require(opts).generate_name = True

    return _apply

"""Options for the Deregister operation."""

from __future__ import annotations

from dataclasses import dataclass

from regbridge.errors import NoOptionsProvided


@dataclass
class DeregisterOptions:
    fail_not_exists: bool = False


def with_fail_if_not_exists():
    """Make Deregister raise if the object does not exist.

    Without this option, deregistering a resource that is not there is
    *not* an error.

    Example::

        sr.namespace("hr").deregister(with_fail_if_not_exists())
    """

    def _apply(opts: DeregisterOptions | None) -> None:
        if opts is None:
            raise NoOptionsProvided()
        opts.fail_not_exists = True

    return _apply

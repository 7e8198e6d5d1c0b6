"""Options for the Get operation."""

from __future__ import annotations

from dataclasses import dataclass

from regbridge.errors import NoOptionsProvided


@dataclass
class GetOptions:
    # Bypass cache and retrieve the object from the service registry.
    force_refresh: bool = False


def with_force_refresh():
    """Force Get to bypass cache and retrieve the object from the service registry.

    If the registry was started with ``with_no_cache()`` this has no effect,
    as it is the default behavior anyways.

    Example::

        ns = sr.namespace("hr").get(with_force_refresh())
    """

    def _apply(opts: GetOptions | None) -> None:
        if opts is None:
            raise NoOptionsProvided()
        opts.force_refresh = True

    return _apply

"""Options to fine tune the behavior of a ServiceRegistry and its backend."""

from __future__ import annotations

from dataclasses import dataclass

from regbridge.errors import InvalidCacheExpirationTime, NoOptionsProvided

# Seconds an object can stay on cache before being considered stale.
DEFAULT_CACHE_EXPIRATION_TIME = 5 * 60.0
# Seconds between two purges of expired cache entries.
DEFAULT_CACHE_CLEANUP_TIME = 10 * 60.0


@dataclass
class RegistryOptions:
    # 0 disables the cache.
    cache_expiration_time: float = DEFAULT_CACHE_EXPIRATION_TIME
    cache_cleanup_time: float = DEFAULT_CACHE_CLEANUP_TIME


def with_no_cache():
    """Never use cache and always query the service registry.

    This may slow things down if the same objects are read over and over.
    """

    def _apply(opts: RegistryOptions | None) -> None:
        if opts is None:
            raise NoOptionsProvided()
        opts.cache_expiration_time = 0

    return _apply


def with_cache_expiration_time(seconds: float):
    """Use a custom cache expiration time instead of the default 5 minutes.

    Long times may keep outdated values around if other applications update
    the service registry as well. To disable cache use ``with_no_cache()``.
    """

    def _apply(opts: RegistryOptions | None) -> None:
        if opts is None:
            raise NoOptionsProvided()
        if seconds <= 0:
            raise InvalidCacheExpirationTime()
        opts.cache_expiration_time = seconds

    return _apply

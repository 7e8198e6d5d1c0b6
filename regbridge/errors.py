"""Error taxonomy for regbridge.

Every failure is raised as a subclass of ``RegistryError``. Backends are free
to raise their own exceptions: the ``is_*`` predicates below classify them by
following explicit ``raise ... from ...`` chains (``__cause__``) so that callers
never need to know which backend is plugged in.

- EmptyNameError: a handle (or one of its ancestors) has no name
- InvalidOptionError: an option was given an invalid value
- NotFoundError / AlreadyExistsError: existence conflicts, per resource kind
- IteratorDone: a list iterator has no more results
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for all regbridge errors."""

    default_message = "service registry error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


# ── Names ────────────────────────────────────────────────────────────


class EmptyNameError(RegistryError, ValueError):
    default_message = "empty name provided"


class EmptyNamespaceName(EmptyNameError):
    default_message = "no namespace name provided"


class EmptyServiceName(EmptyNameError):
    default_message = "no service name provided"


class EmptyEndpointName(EmptyNameError):
    default_message = "no endpoint name provided"


# ── Existence ────────────────────────────────────────────────────────


class NotFoundError(RegistryError):
    default_message = "not found"


class NamespaceNotFound(NotFoundError):
    default_message = "namespace not found"


class ServiceNotFound(NotFoundError):
    default_message = "service not found"


class EndpointNotFound(NotFoundError):
    default_message = "endpoint not found"


class AlreadyExistsError(RegistryError):
    default_message = "already exists"


class NamespaceAlreadyExists(AlreadyExistsError):
    default_message = "namespace already exists"


class ServiceAlreadyExists(AlreadyExistsError):
    default_message = "service already exists"


class EndpointAlreadyExists(AlreadyExistsError):
    default_message = "endpoint already exists"


class ExistenceCheckError(RegistryError):
    """The backend failed while register was checking if the object exists."""

    default_message = "error while checking if object exists"


# ── Operations ───────────────────────────────────────────────────────


class UninitializedOperation(RegistryError):
    default_message = "operation not initialized"


class IteratorDone(RegistryError):
    default_message = "iterator done"


class PermissionDenied(RegistryError):
    default_message = "permission denied"


class NoBackendProvided(RegistryError):
    default_message = "no backend provided"


# ── Options ──────────────────────────────────────────────────────────


class InvalidOptionError(RegistryError, ValueError):
    default_message = "invalid option"


class NoOptionsProvided(InvalidOptionError):
    default_message = "no options provided"


class InvalidAddress(InvalidOptionError):
    default_message = "invalid address provided"


class InvalidPort(InvalidOptionError):
    default_message = "invalid port"


class EmptyMetadataKey(InvalidOptionError):
    default_message = "metadata contains an empty key"


class EmptyNameInFilter(InvalidOptionError):
    default_message = "empty nameIn filter provided"


class InvalidNamePrefixFilter(InvalidOptionError):
    default_message = "invalid name prefix filter provided"


class IncompatibleNameFilters(InvalidOptionError):
    default_message = '"NameIn" and "NamePrefix" filters cannot be used together'


class EmptyMetadataKeysFilter(InvalidOptionError):
    default_message = "empty metadata keys filter provided"


class IncompatibleMetadataFilters(InvalidOptionError):
    default_message = '"NoMetadata" and "Metadata" filters cannot be used together'


class InvalidResultsNumber(InvalidOptionError):
    default_message = "invalid results number provided"


class InvalidCIDR(InvalidOptionError):
    default_message = "invalid CIDR provided"


class IncompatibleAddressFilters(InvalidOptionError):
    default_message = '"AddressFamily" and "CIDR" filters cannot be used together'


class NoPortsProvided(InvalidOptionError):
    default_message = "no ports provided"


class InvalidPortRange(InvalidOptionError):
    default_message = "invalid port range provided"


class InvalidCacheExpirationTime(InvalidOptionError):
    default_message = "invalid cache expiration time provided"


# ── Classification ───────────────────────────────────────────────────


def _chain(err: BaseException | None):
    """Yield an exception and everything it was explicitly raised from.

    Implicit ``__context__`` is not followed: an error raised while handling
    a NotFound is a different failure, not a NotFound.
    """
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__


def _status_code(err: BaseException) -> int | None:
    """Return an HTTP-like status code carried by a client exception, if any."""
    code = getattr(err, "status_code", None)
    if code is None:
        code = getattr(getattr(err, "response", None), "status_code", None)
    return code if isinstance(code, int) else None


def is_iterator_done(err: BaseException | None) -> bool:
    """Return True if the iterator has gone through all of its results.

    If False, then some other error happened and it should be handled as a
    failure rather than as the end of the list.
    """
    return any(isinstance(e, (IteratorDone, StopIteration)) for e in _chain(err))


def is_not_found(err: BaseException | None) -> bool:
    """Return True if the service registry reported that the object does not exist."""
    for e in _chain(err):
        if isinstance(e, NotFoundError) or _status_code(e) == 404:
            return True
    return False


def is_already_exists(err: BaseException | None) -> bool:
    """Return True if the service registry reported that the object already exists."""
    for e in _chain(err):
        if isinstance(e, AlreadyExistsError) or _status_code(e) == 409:
            return True
    return False


def is_permission_error(err: BaseException | None) -> bool:
    """Return True if the service registry refused the call for lack of permissions."""
    for e in _chain(err):
        if isinstance(e, (PermissionDenied, PermissionError)) or _status_code(e) == 403:
            return True
    return False

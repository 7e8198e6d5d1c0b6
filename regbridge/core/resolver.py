"""Register-mode resolution.

Register first runs Get and then decides, from its outcome and the
requested mode, whether to create, update or fail:

    Get outcome   CREATE_OR_UPDATE   CREATE           UPDATE
    found         update             AlreadyExists    update
    not found     create             create           NotFound
    other error   ExistenceCheckError (whatever the mode)

There is no compare-and-swap with the backend: two concurrent registers of
the same name can both pass the existence check.
"""

from __future__ import annotations

import secrets
import string
from typing import Optional, Tuple

from regbridge import errors
from regbridge.models import ResourceKind, deep_copy_metadata
from regbridge.options.register import RegisterMode

GENERATED_NAME_LENGTH = 8
# RFC1035 friendly: lower case letters and digits only.
_NAME_ALPHABET = string.ascii_lowercase + string.digits

_ALREADY_EXISTS = {
    ResourceKind.NAMESPACE: errors.NamespaceAlreadyExists,
    ResourceKind.SERVICE: errors.ServiceAlreadyExists,
    ResourceKind.ENDPOINT: errors.EndpointAlreadyExists,
}

_NOT_FOUND = {
    ResourceKind.NAMESPACE: errors.NamespaceNotFound,
    ResourceKind.SERVICE: errors.ServiceNotFound,
    ResourceKind.ENDPOINT: errors.EndpointNotFound,
}


def resolve_register(
    kind: ResourceKind,
    mode: RegisterMode,
    existing_metadata: Optional[dict[str, str]],
    get_error: Optional[BaseException],
    metadata: dict[str, str],
    replace_metadata: bool,
) -> Tuple[RegisterMode, dict[str, str]]:
    """Resolve the register mode and the metadata to write.

    ``existing_metadata`` is the metadata of the object returned by Get, or
    None if Get failed with ``get_error``. The returned mode is always either
    ``CREATE`` or ``UPDATE``.
    """
    if get_error is None:
        if mode == RegisterMode.CREATE:
            raise _ALREADY_EXISTS[kind]()
        resolved = RegisterMode.UPDATE
        merged = deep_copy_metadata(existing_metadata)
    elif errors.is_not_found(get_error):
        if mode == RegisterMode.UPDATE:
            raise _NOT_FOUND[kind]() from get_error
        resolved = RegisterMode.CREATE
        merged = {}
    else:
        raise errors.ExistenceCheckError(
            f"error while checking if {kind.label} exists: {get_error}"
        ) from get_error

    if replace_metadata:
        merged = {}
    merged.update(metadata)

    return resolved, merged


def resolve_value(requested, existing, unset):
    """Return the requested value, or the stored one if unset, or ``unset`` on create."""
    if requested is not None:
        return requested
    if existing is not None:
        return existing
    return unset


def generate_random_name(service_name: str) -> str:
    """Generate an endpoint name from its parent service's name."""
    suffix = "".join(secrets.choice(_NAME_ALPHABET) for _ in range(GENERATED_NAME_LENGTH))
    return f"{service_name}-{suffix}"

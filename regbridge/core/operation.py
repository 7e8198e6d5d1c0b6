"""Shared behavior of namespace, service and endpoint operations.

An operation is the intention to do something on one named object (or, for
listing, on any object of a kind). It is a cheap value: building one never
fails nor talks to the backend, all checks happen when a verb is invoked.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from regbridge.core.iterator import Failed, Ready, ResultIterator, Uninitialized
from regbridge.core.resolver import resolve_register
from regbridge.errors import (
    EmptyNameError,
    RegistryError,
    UninitializedOperation,
    is_not_found,
)
from regbridge.models import ResourceKind
from regbridge.options import apply_options
from regbridge.options.deregister import DeregisterOptions
from regbridge.options.get import GetOptions
from regbridge.options.listing import ListOptions
from regbridge.options.register import RegisterMode, RegisterOptions

logger = logging.getLogger(__name__)


def join_path(parent_path: str, kind: ResourceKind, name: str) -> str:
    return "/".join(part for part in (parent_path, kind.path_segment, name) if part)


class ResourceOperation:
    """Base class for operations at one level of the hierarchy.

    Subclasses set ``kind`` and ``empty_name_error`` and implement the
    hooks at the bottom of the class.
    """

    kind: ResourceKind
    empty_name_error: type[EmptyNameError]

    def __init__(
        self,
        name: str = "",
        adapter_op: Any = None,
        parent: Optional[ResourceOperation] = None,
        root: Any = None,
    ):
        self._name = name
        self._parent = parent
        self._adapter_op = adapter_op
        self._root = root
        self._path = join_path(parent.path if parent else "", self.kind, name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._path!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> str:
        """Hierarchical path of the object, for diagnostics only."""
        return self._path

    @property
    def parent(self) -> Optional[ResourceOperation]:
        return self._parent

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def get(self, *opts, ctx: Any = None):
        """Retrieve the object, from cache unless ``with_force_refresh()`` is given."""
        self._check_initialized()
        self._check_names()
        get_opts = apply_options(GetOptions(), opts)
        return self._adapter_op.get(ctx, get_opts)

    def register(self, *opts, ctx: Any = None) -> None:
        """Insert the object, or update it if it already exists.

        No update is sent when the object already looks exactly like the
        result would.
        """
        self._check_initialized()
        self._check_register_names()
        reg_opts = apply_options(RegisterOptions(), opts)
        self._prepare_register(reg_opts)

        existing = None
        get_error = None
        try:
            existing = self.get(ctx=ctx)
        except Exception as e:
            get_error = e

        mode, metadata = resolve_register(
            self.kind,
            reg_opts.mode,
            existing.metadata if existing is not None else None,
            get_error,
            reg_opts.metadata,
            reg_opts.replace_metadata,
        )
        target = self._build_record(reg_opts, existing, metadata)

        if mode == RegisterMode.CREATE:
            logger.debug("creating %s", self._path)
            self._create(ctx, target)
            return

        if existing.deep_equal_to(target):
            logger.debug("%s is already up to date, skipping update", self._path)
            return

        logger.debug("updating %s", self._path)
        self._update(ctx, target)

    def deregister(self, *opts, ctx: Any = None) -> None:
        """Remove the object from the service registry.

        Deregistering an object that does not exist succeeds, unless
        ``with_fail_if_not_exists()`` is given.
        """
        self._check_initialized()
        self._check_names()
        der_opts = apply_options(DeregisterOptions(), opts)

        try:
            self._adapter_op.delete(ctx)
        except Exception as e:
            if is_not_found(e) and not der_opts.fail_not_exists:
                logger.debug("%s does not exist, nothing to deregister", self._path)
                return
            raise

    def list(self, *opts) -> ResultIterator:
        """Return an iterator over the objects of this kind passing the filters.

        Objects are always listed inside a named parent, so every ancestor
        must have a name. Errors are raised by the iterator's ``next()``.
        """
        if self._root is None:
            return ResultIterator(Uninitialized())

        try:
            if self._parent is not None:
                self._parent._check_names()
            list_opts = apply_options(ListOptions(), opts)
        except RegistryError as e:
            return ResultIterator(Failed(e), self._rehydrate)

        return ResultIterator(Ready(self._adapter_op.list(list_opts)), self._rehydrate)

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def _check_initialized(self) -> None:
        if self._root is None:
            raise UninitializedOperation()

    def _check_names(self) -> None:
        if not self._name:
            raise self.empty_name_error()
        if self._parent is not None:
            self._parent._check_names()

    def _check_register_names(self) -> None:
        self._check_names()

    def _rehydrate(self, record, adapter_op):
        op = self._sibling(record.name)
        op._adapter_op = adapter_op
        return op

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _prepare_register(self, reg_opts: RegisterOptions) -> None:
        """Last chance to adjust the operation before the existence check."""

    def _sibling(self, name: str) -> ResourceOperation:
        """Build an operation on ``name`` through the public factory."""
        raise NotImplementedError

    def _build_record(self, reg_opts: RegisterOptions, existing, metadata: dict[str, str]):
        raise NotImplementedError

    def _create(self, ctx: Any, record) -> None:
        raise NotImplementedError

    def _update(self, ctx: Any, record) -> None:
        raise NotImplementedError

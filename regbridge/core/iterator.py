"""Lazy, forward-only iterators over List results.

An iterator is created by ``list()`` and is in one of three states:

- ``Ready``: wraps the backend cursor, which pulls pages and runs filters
- ``Failed``: an option or name error was found while building the iterator,
  or the cursor raised
- ``Uninitialized``: the handle did not come from a ServiceRegistry

``list()`` itself never raises: errors surface on the first ``next()``. An
iterator is not restartable: once exhausted or errored, every later
``next()`` raises the same error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Tuple, TypeVar, Union

from regbridge.errors import IteratorDone, UninitializedOperation

R = TypeVar("R")
H = TypeVar("H")


@dataclass(frozen=True)
class Ready:
    cursor: Any


@dataclass(frozen=True)
class Failed:
    error: Exception


@dataclass(frozen=True)
class Uninitialized:
    pass


IteratorState = Union[Ready, Failed, Uninitialized]


class ResultIterator(Generic[R, H]):
    """Iterate through the objects returned by a List.

    Use ``next()`` and stop on ``IteratorDone`` (see ``errors.is_iterator_done``)::

        it = sr.namespace(ANY).list(with_kv("env", "prod"))
        while True:
            try:
                ns, ns_op = it.next()
            except IteratorDone:
                break

    or just loop over it, in which case ``IteratorDone`` ends the loop and
    any other error is raised::

        for ns, ns_op in sr.namespace(ANY).list():
            ...
    """

    def __init__(self, state: IteratorState, rehydrate: Callable[[R, Any], H] | None = None):
        self._state = state
        self._rehydrate = rehydrate

    @property
    def state(self) -> IteratorState:
        return self._state

    def next(self, ctx: Any = None) -> Tuple[R, H]:
        """Return the next record that passed the filters, with its handle."""
        state = self._state
        if isinstance(state, Uninitialized):
            raise UninitializedOperation()
        if isinstance(state, Failed):
            # Drop the frames of earlier raises so they don't pile up.
            raise state.error.with_traceback(None)

        try:
            record, adapter_op = state.cursor.next(ctx)
        except Exception as e:
            # Once exhausted or errored, the iterator stays that way.
            self._state = Failed(e)
            raise
        # The adapter returned by the cursor may have stored things to speed
        # up later calls (e.g. IDs), so the new handle keeps it.
        return record, self._rehydrate(record, adapter_op)

    def __iter__(self):
        return self

    def __next__(self) -> Tuple[R, H]:
        try:
            return self.next()
        except IteratorDone:
            raise StopIteration from None

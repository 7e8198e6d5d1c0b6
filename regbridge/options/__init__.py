"""Options — fine tune the behavior of each verb.

Every verb has its own options object and a family of ``with_*`` functions
that build options. An option is a callable that mutates the options object
it receives or raises an ``InvalidOptionError``; options are applied in call
order and the first failure stops the chain, before anything reaches the
service registry.
"""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

T = TypeVar("T")

Option = Callable[[T], None]


def apply_options(target: T, opts: Iterable[Option]) -> T:
    """Apply every option to ``target`` in order and return it."""
    for opt in opts:
        opt(target)
    return target

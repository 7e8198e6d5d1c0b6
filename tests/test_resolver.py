"""Tests for register-mode resolution and name generation."""

import re

import pytest

from regbridge import errors
from regbridge.core.resolver import (
    GENERATED_NAME_LENGTH,
    generate_random_name,
    resolve_register,
    resolve_value,
)
from regbridge.models import ResourceKind
from regbridge.options.register import RegisterMode

CREATE_OR_UPDATE = RegisterMode.CREATE_OR_UPDATE
CREATE = RegisterMode.CREATE
UPDATE = RegisterMode.UPDATE

_FOUND = "found"
_NOT_FOUND = "not found"
_BROKEN = "broken"


def _resolve(outcome, mode, kind=ResourceKind.SERVICE, existing=None, metadata=None, replace=False):
    get_error = None
    if outcome == _NOT_FOUND:
        get_error = errors.ServiceNotFound()
    elif outcome == _BROKEN:
        get_error = ConnectionError("connection refused")
    elif existing is None:
        existing = {}
    return resolve_register(kind, mode, existing, get_error, metadata or {}, replace)


@pytest.mark.parametrize(
    "outcome, mode, expected",
    [
        (_FOUND, CREATE_OR_UPDATE, UPDATE),
        (_FOUND, UPDATE, UPDATE),
        (_NOT_FOUND, CREATE_OR_UPDATE, CREATE),
        (_NOT_FOUND, CREATE, CREATE),
    ],
)
def test_decision_table_writes(outcome, mode, expected):
    resolved, _ = _resolve(outcome, mode)
    assert resolved == expected


def test_decision_table_create_on_existing():
    with pytest.raises(errors.ServiceAlreadyExists):
        _resolve(_FOUND, CREATE)


def test_decision_table_update_on_missing():
    with pytest.raises(errors.ServiceNotFound) as exc_info:
        _resolve(_NOT_FOUND, UPDATE)
    assert errors.is_not_found(exc_info.value)


@pytest.mark.parametrize("mode", [CREATE_OR_UPDATE, CREATE, UPDATE])
def test_decision_table_other_errors(mode):
    with pytest.raises(errors.ExistenceCheckError) as exc_info:
        _resolve(_BROKEN, mode)
    assert "error while checking if service exists" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, ConnectionError)


@pytest.mark.parametrize(
    "kind, already_exists",
    [
        (ResourceKind.NAMESPACE, errors.NamespaceAlreadyExists),
        (ResourceKind.SERVICE, errors.ServiceAlreadyExists),
        (ResourceKind.ENDPOINT, errors.EndpointAlreadyExists),
    ],
)
def test_errors_match_the_kind(kind, already_exists):
    with pytest.raises(already_exists):
        resolve_register(kind, CREATE, {}, None, {}, False)


def test_metadata_merge():
    existing = {"a": "1", "b": "2"}
    _, merged = _resolve(_FOUND, CREATE_OR_UPDATE, existing=existing, metadata={"b": "9", "c": "3"})
    assert merged == {"a": "1", "b": "9", "c": "3"}
    # The stored metadata is never touched.
    assert existing == {"a": "1", "b": "2"}


def test_metadata_replace():
    _, merged = _resolve(
        _FOUND, CREATE_OR_UPDATE, existing={"a": "1", "b": "2"}, metadata={"z": "1"}, replace=True
    )
    assert merged == {"z": "1"}


def test_metadata_on_create():
    _, merged = _resolve(_NOT_FOUND, CREATE_OR_UPDATE)
    assert merged == {}
    _, merged = _resolve(_NOT_FOUND, CREATE, metadata={"k": "v"})
    assert merged == {"k": "v"}


def test_resolve_value():
    assert resolve_value("10.0.0.2", "10.0.0.1", "") == "10.0.0.2"
    assert resolve_value(None, "10.0.0.1", "") == "10.0.0.1"
    assert resolve_value(None, None, "") == ""
    assert resolve_value(0, 80, 0) == 0


def test_generated_name_format():
    name = generate_random_name("payroll")
    assert re.fullmatch(r"payroll-[a-z0-9]{%d}" % GENERATED_NAME_LENGTH, name)
    assert generate_random_name("payroll") != generate_random_name("payroll")

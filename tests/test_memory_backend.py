"""Tests for the in-memory backend, through the public API."""

import pytest

from regbridge import ANY, ServiceRegistry, errors
from regbridge.backends.memory import MemoryBackend, MemoryCursor
from regbridge.options.deregister import with_fail_if_not_exists
from regbridge.options.get import with_force_refresh
from regbridge.options.listing import (
    ListOptions,
    with_cidr,
    with_ipv4_only,
    with_name_in,
    with_name_prefix,
    with_no_metadata,
    with_port_range,
    with_results_number,
)
from regbridge.options.listing import with_kv as list_kv
from regbridge.options.register import (
    with_address,
    with_create_mode,
    with_generate_name,
    with_kv,
    with_port,
    with_update_mode,
)
from regbridge.options.registry import with_no_cache


def _populated():
    sr = ServiceRegistry.from_memory()
    for name, env in [("sales", "prod"), ("hr", "prod"), ("it", "dev"), ("marketing", "")]:
        opts = [with_kv("env", env)] if env else []
        sr.namespace(name).register(*opts)

    payroll = sr.namespace("hr").service("payroll")
    payroll.register(with_kv("version", "1"))
    payroll.endpoint("payroll-1").register(with_address("10.10.10.1"), with_port(80))
    payroll.endpoint("payroll-2").register(with_address("10.10.20.1"), with_port(8080))
    payroll.endpoint("payroll-3").register(with_address("fe80::1"), with_port(443))
    return sr


# ── CRUD ─────────────────────────────────────────────────────────────


def test_register_and_get():
    sr = _populated()
    ns = sr.namespace("sales").get()
    assert ns.name == "sales"
    assert ns.metadata == {"env": "prod"}

    ep = sr.namespace("hr").service("payroll").endpoint("payroll-1").get()
    assert (ep.namespace, ep.service, ep.address, ep.port) == ("hr", "payroll", "10.10.10.1", 80)
    assert ep.original_object["address"] == "10.10.10.1"


def test_register_update_merges_metadata():
    sr = ServiceRegistry.from_memory()
    sr.namespace("sales").register(with_kv("a", "1"), with_kv("b", "2"))
    sr.namespace("sales").register(with_kv("b", "9"), with_kv("c", "3"))
    assert sr.namespace("sales").get().metadata == {"a": "1", "b": "9", "c": "3"}


def test_register_update_keeps_address_and_port():
    sr = _populated()
    ep = sr.namespace("hr").service("payroll").endpoint("payroll-1")
    ep.register(with_kv("weight", "3"))
    stored = ep.get()
    assert stored.address == "10.10.10.1"
    assert stored.port == 80
    assert stored.metadata == {"weight": "3"}


def test_register_modes():
    sr = _populated()
    with pytest.raises(errors.NamespaceAlreadyExists):
        sr.namespace("sales").register(with_create_mode())
    with pytest.raises(errors.ServiceNotFound):
        sr.namespace("hr").service("billing").register(with_update_mode())


def test_children_need_a_parent():
    sr = ServiceRegistry.from_memory()
    with pytest.raises(errors.NamespaceNotFound):
        sr.namespace("missing").service("payroll").register()

    with pytest.raises(errors.NamespaceNotFound):
        sr.namespace("missing").service("payroll").get()


def test_returned_records_are_copies():
    sr = _populated()
    ns = sr.namespace("sales").get()
    ns.metadata["env"] = "changed"
    assert sr.namespace("sales").get().metadata == {"env": "prod"}


def test_deregister_cascades():
    sr = _populated()
    sr.namespace("hr").deregister()

    with pytest.raises(errors.NamespaceNotFound):
        sr.namespace("hr").get()

    sr.namespace("hr").register()
    with pytest.raises(errors.ServiceNotFound):
        sr.namespace("hr").service("payroll").get()


def test_deregister_missing():
    sr = _populated()
    sr.namespace("nope").deregister()
    with pytest.raises(errors.NamespaceNotFound):
        sr.namespace("nope").deregister(with_fail_if_not_exists())
    with pytest.raises(errors.EndpointNotFound):
        sr.namespace("hr").service("payroll").endpoint("nope").deregister(with_fail_if_not_exists())


def test_generated_endpoint_is_stored():
    sr = _populated()
    ep = sr.namespace("hr").service("payroll").endpoint(ANY)
    ep.register(with_generate_name(), with_address("10.10.10.22"), with_port(9876))

    stored = sr.namespace("hr").service("payroll").endpoint(ep.name).get()
    assert stored.address == "10.10.10.22"
    assert stored.port == 9876


# ── Cache ────────────────────────────────────────────────────────────


def test_get_serves_from_cache_until_refreshed():
    backend = MemoryBackend()
    sr = ServiceRegistry.from_backend(backend)
    sr.namespace("sales").register(with_kv("env", "prod"))
    sr.namespace("sales").get()

    # Someone else changes the store behind our back.
    backend.collection(())["sales"]["metadata"] = {"env": "dev"}

    assert sr.namespace("sales").get().metadata == {"env": "prod"}
    assert sr.namespace("sales").get(with_force_refresh()).metadata == {"env": "dev"}


def test_no_cache():
    sr = ServiceRegistry.from_memory(with_no_cache())
    backend = sr.backend
    sr.namespace("sales").register(with_kv("env", "prod"))

    backend.collection(())["sales"]["metadata"] = {"env": "dev"}
    assert sr.namespace("sales").get().metadata == {"env": "dev"}
    assert len(backend.cache) == 0


# ── List ─────────────────────────────────────────────────────────────


def _names(it):
    return [record.name for record, _ in it]


def test_list_sorted():
    sr = _populated()
    assert _names(sr.namespace(ANY).list()) == ["hr", "it", "marketing", "sales"]


@pytest.mark.parametrize("results", [1, 2, 3, 4, 50])
def test_list_pagination(results):
    sr = _populated()
    assert _names(sr.namespace(ANY).list(with_results_number(results))) == ["hr", "it", "marketing", "sales"]


def test_list_pages_lazily():
    backend = MemoryBackend()
    sr = ServiceRegistry.from_backend(backend)
    for name in ["a", "b", "c", "d", "e"]:
        sr.namespace(name).register()

    cursor = backend.namespace(ANY).list(ListOptions(results=2))
    assert isinstance(cursor, MemoryCursor)
    cursor.next(None)
    cursor.next(None)
    assert cursor.pages == 1
    cursor.next(None)
    assert cursor.pages == 2


def test_list_filters():
    sr = _populated()
    assert _names(sr.namespace(ANY).list(list_kv("env", "prod"))) == ["hr", "sales"]
    assert _names(sr.namespace(ANY).list(with_no_metadata())) == ["marketing"]
    assert _names(sr.namespace(ANY).list(with_name_in("it", "sales", "nope"))) == ["it", "sales"]
    assert _names(sr.namespace(ANY).list(with_name_prefix("ma"))) == ["marketing"]


def test_list_filters_with_small_pages():
    sr = _populated()
    it = sr.namespace(ANY).list(list_kv("env", "prod"), with_results_number(1))
    assert _names(it) == ["hr", "sales"]


def test_list_endpoint_filters():
    payroll = _populated().namespace("hr").service("payroll")
    assert _names(payroll.endpoint(ANY).list(with_cidr("10.10.10.0/24"))) == ["payroll-1"]
    assert _names(payroll.endpoint(ANY).list(with_ipv4_only())) == ["payroll-1", "payroll-2"]
    assert _names(payroll.endpoint(ANY).list(with_port_range(400, 9000))) == ["payroll-2", "payroll-3"]


def test_list_named_handle_lists_only_itself():
    sr = _populated()
    assert _names(sr.namespace("it").list()) == ["it"]


def test_list_missing_parent():
    sr = _populated()
    with pytest.raises(errors.NamespaceNotFound):
        sr.namespace("nope").service(ANY).list().next()


def test_list_handles_work():
    sr = _populated()
    for svc, svc_op in sr.namespace("hr").service(ANY).list():
        assert svc_op.get().deep_equal_to(svc)
        svc_op.register(with_kv("listed", "yes"))

    assert sr.namespace("hr").service("payroll").get().metadata == {"version": "1", "listed": "yes"}


def test_iterator_done_after_last_item():
    sr = _populated()
    it = sr.namespace(ANY).list(with_name_in("hr"))
    ns, ns_op = it.next()
    assert ns.name == "hr"
    with pytest.raises(errors.IteratorDone):
        it.next()
    with pytest.raises(errors.IteratorDone):
        it.next()


def test_errored_list_does_not_restart():
    sr = ServiceRegistry.from_memory()
    it = sr.namespace("hr").service(ANY).list()
    with pytest.raises(errors.NamespaceNotFound):
        it.next()

    sr.namespace("hr").register()
    sr.namespace("hr").service("payroll").register()

    with pytest.raises(errors.NamespaceNotFound):
        it.next()
    assert _names(sr.namespace("hr").service(ANY).list()) == ["payroll"]

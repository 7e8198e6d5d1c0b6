"""Tests for the command line interface."""

import re
import tempfile

import yaml
from click.testing import CliRunner

from regbridge.cli import main


def _run(tmpdir, *args):
    runner = CliRunner()
    return runner.invoke(main, ["--backend", "file", "--registry-dir", tmpdir, *args])


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0


def test_namespace_lifecycle():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "namespace", "register", "sales", "--kv", "env=prod")
        assert result.exit_code == 0, result.output
        assert "Registered namespace sales" in result.output

        result = _run(tmpdir, "namespace", "get", "sales", "--output", "yaml")
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(result.output) == [{"name": "sales", "metadata": {"env": "prod"}}]

        result = _run(tmpdir, "namespace", "list")
        assert result.exit_code == 0
        assert "sales" in result.output

        result = _run(tmpdir, "namespace", "deregister", "sales")
        assert result.exit_code == 0

        result = _run(tmpdir, "namespace", "list")
        assert "No namespaces found" in result.output


def test_errors_exit_with_status_1():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "namespace", "get", "nope")
        assert result.exit_code == 1
        assert "namespace not found" in result.output

        result = _run(tmpdir, "namespace", "deregister", "nope", "--fail-if-not-exists")
        assert result.exit_code == 1

        _run(tmpdir, "namespace", "register", "sales")
        result = _run(tmpdir, "namespace", "register", "sales", "--create-only")
        assert result.exit_code == 1
        assert "namespace already exists" in result.output


def test_conflicting_modes():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "namespace", "register", "sales", "--create-only", "--update-only")
        assert result.exit_code == 2


def test_bad_kv():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "namespace", "register", "sales", "--kv", "novalue")
        assert result.exit_code == 2


def test_services_and_endpoints():
    with tempfile.TemporaryDirectory() as tmpdir:
        assert _run(tmpdir, "namespace", "register", "hr").exit_code == 0
        assert _run(tmpdir, "service", "register", "hr", "payroll", "--kv", "version=1").exit_code == 0

        result = _run(
            tmpdir, "endpoint", "register", "hr", "payroll",
            "--generate-name", "--address", "10.10.10.22", "--port", "9876",
        )
        assert result.exit_code == 0, result.output
        assert re.search(r"endpoints/payroll-[a-z0-9]{8}", result.output.replace("\n", ""))

        assert _run(
            tmpdir, "endpoint", "register", "hr", "payroll", "payroll-static",
            "--address", "192.168.0.1", "--port", "80",
        ).exit_code == 0

        result = _run(tmpdir, "endpoint", "list", "hr", "payroll", "--cidr", "10.10.10.0/24", "-o", "yaml")
        assert result.exit_code == 0, result.output
        endpoints = yaml.safe_load(result.output)
        assert len(endpoints) == 1
        assert endpoints[0]["address"] == "10.10.10.22"
        assert endpoints[0]["port"] == 9876

        result = _run(tmpdir, "service", "list", "hr", "-o", "yaml")
        assert yaml.safe_load(result.output) == [
            {"name": "payroll", "namespace": "hr", "metadata": {"version": "1"}}
        ]


def test_endpoint_needs_a_name():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "namespace", "register", "hr")
        _run(tmpdir, "service", "register", "hr", "payroll")
        result = _run(tmpdir, "endpoint", "register", "hr", "payroll", "--address", "10.0.0.1")
        assert result.exit_code == 1
        assert "no endpoint name provided" in result.output


def test_invalid_options_are_reported():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "namespace", "register", "hr")
        _run(tmpdir, "service", "register", "hr", "payroll")
        result = _run(tmpdir, "endpoint", "register", "hr", "payroll", "ep", "--address", "not-an-ip")
        assert result.exit_code == 1
        assert "invalid address" in result.output

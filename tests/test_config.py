"""Tests for configuration loading."""

import tempfile
from pathlib import Path

import pytest

from regbridge.backends.file import FileBackend
from regbridge.backends.memory import MemoryBackend
from regbridge.config import (
    BackendType,
    ConfigError,
    RegistryConfig,
    build_registry,
    load_config,
)


def _write(tmpdir, text):
    path = Path(tmpdir) / "regbridge.yaml"
    path.write_text(text)
    return path


def test_defaults():
    config = load_config(environ={})
    assert config == RegistryConfig()
    assert config.backend == BackendType.MEMORY


def test_load_from_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write(tmpdir, "backend: file\nregistry_dir: /tmp/reg\ncache_expiration: 60\nlog_level: info\n")
        config = load_config(path, environ={})

    assert config.backend == BackendType.FILE
    assert config.registry_dir == "/tmp/reg"
    assert config.cache_expiration == 60.0
    assert config.log_level == "INFO"


def test_environment_overrides_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write(tmpdir, "backend: file\ncache_expiration: 60\n")
        config = load_config(
            path,
            environ={"REGBRIDGE_BACKEND": "memory", "REGBRIDGE_CACHE_EXPIRATION": "5"},
        )

    assert config.backend == BackendType.MEMORY
    assert config.cache_expiration == 5.0


@pytest.mark.parametrize(
    "text",
    [
        "backend: etcd\n",
        "cache_expiration: soon\n",
        "cache_expiration: -1\n",
        "unknown_key: 1\n",
        "- just\n- a list\n",
        "backend: [unclosed\n",
    ],
)
def test_invalid_config(text):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write(tmpdir, text)
        with pytest.raises(ConfigError):
            load_config(path, environ={})


def test_registry_options():
    assert RegistryConfig(no_cache=True).registry_options()
    assert RegistryConfig(cache_expiration=0).registry_options()


def test_build_memory_registry():
    sr = build_registry(RegistryConfig(no_cache=True))
    assert isinstance(sr.backend, MemoryBackend)
    assert not sr.backend.cache.enabled


def test_build_file_registry():
    with tempfile.TemporaryDirectory() as tmpdir:
        sr = build_registry(RegistryConfig(backend=BackendType.FILE, registry_dir=tmpdir, cache_expiration=30))
        assert isinstance(sr.backend, FileBackend)
        assert sr.backend.cache.expiration == 30

"""Configuration for building a ServiceRegistry outside of code.

A config file is plain YAML::

    backend: file
    registry_dir: /var/lib/regbridge
    cache_expiration: 60
    log_level: INFO

Any of these can be overridden with ``REGBRIDGE_BACKEND``,
``REGBRIDGE_REGISTRY_DIR``, ``REGBRIDGE_CACHE_EXPIRATION`` and
``REGBRIDGE_LOG_LEVEL``. A ``cache_expiration`` of 0 (or ``no_cache: true``)
disables the cache.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

import yaml

from regbridge.core.registry import ServiceRegistry
from regbridge.options.registry import (
    DEFAULT_CACHE_EXPIRATION_TIME,
    with_cache_expiration_time,
    with_no_cache,
)

ENV_PREFIX = "REGBRIDGE_"


class ConfigError(ValueError):
    """The configuration file or environment holds an invalid value."""


class BackendType(Enum):
    MEMORY = "memory"
    FILE = "file"


@dataclass
class RegistryConfig:
    backend: BackendType = BackendType.MEMORY
    registry_dir: str = ".regbridge"
    cache_expiration: float = DEFAULT_CACHE_EXPIRATION_TIME
    no_cache: bool = False
    log_level: str = "WARNING"

    def registry_options(self) -> list:
        if self.no_cache or self.cache_expiration == 0:
            return [with_no_cache()]
        return [with_cache_expiration_time(self.cache_expiration)]


def load_config(path: str | Path | None = None, environ: Optional[Mapping[str, str]] = None) -> RegistryConfig:
    """Load the configuration from a YAML file, then apply environment overrides."""
    data: dict = {}
    if path is not None:
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping")

    env = os.environ if environ is None else environ
    overrides = {
        "backend": env.get(ENV_PREFIX + "BACKEND"),
        "registry_dir": env.get(ENV_PREFIX + "REGISTRY_DIR"),
        "cache_expiration": env.get(ENV_PREFIX + "CACHE_EXPIRATION"),
        "log_level": env.get(ENV_PREFIX + "LOG_LEVEL"),
    }
    data.update({key: value for key, value in overrides.items() if value is not None})

    return _parse(data)


def _parse(data: dict) -> RegistryConfig:
    unknown = set(data) - {"backend", "registry_dir", "cache_expiration", "no_cache", "log_level"}
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(sorted(unknown))}")

    try:
        backend = BackendType(str(data.get("backend", "memory")).lower())
    except ValueError as e:
        raise ConfigError(f"unknown backend: {data.get('backend')!r}") from e

    try:
        cache_expiration = float(data.get("cache_expiration", DEFAULT_CACHE_EXPIRATION_TIME))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid cache_expiration: {data.get('cache_expiration')!r}") from e
    if cache_expiration < 0:
        raise ConfigError("cache_expiration cannot be negative")

    return RegistryConfig(
        backend=backend,
        registry_dir=str(data.get("registry_dir", ".regbridge")),
        cache_expiration=cache_expiration,
        no_cache=bool(data.get("no_cache", False)),
        log_level=str(data.get("log_level", "WARNING")).upper(),
    )


def build_registry(config: RegistryConfig) -> ServiceRegistry:
    """Build a ServiceRegistry with the backend described by ``config``."""
    opts = config.registry_options()
    if config.backend == BackendType.FILE:
        return ServiceRegistry.from_file(config.registry_dir, *opts)
    return ServiceRegistry.from_memory(*opts)

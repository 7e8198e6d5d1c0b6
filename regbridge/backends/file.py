"""File-based backend for development and single-host use.

Stores the same tree as ``MemoryBackend`` as YAML in a local directory,
so registrations survive the process. The file is read again before
every operation, so several processes can share a directory as long as
they don't write at the same time.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml

from regbridge.backends.memory import MemoryBackend
from regbridge.models import ResourceKind
from regbridge.options.registry import RegistryOptions

logger = logging.getLogger(__name__)


class FileBackend(MemoryBackend):
    """YAML-file-backed service registry store."""

    REGISTRY_FILE = "registry.yaml"

    def __init__(self, registry_dir: str | Path, options: Optional[RegistryOptions] = None):
        super().__init__(options)
        self.registry_dir = Path(registry_dir)
        self.registry_dir.mkdir(parents=True, exist_ok=True)
        self.registry_path = self.registry_dir / self.REGISTRY_FILE
        self._load()

    def _load(self) -> None:
        if not self.registry_path.exists():
            self._data = {ResourceKind.NAMESPACE.path_segment: {}}
            return

        with open(self.registry_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict) or not data.get(ResourceKind.NAMESPACE.path_segment):
            data = {ResourceKind.NAMESPACE.path_segment: {}}
        self._data = data

    def _save(self) -> None:
        tmp_path = self.registry_path.with_suffix(".yaml.tmp")
        with open(tmp_path, "w") as f:
            yaml.safe_dump(self._data, f, default_flow_style=False, sort_keys=True)
        tmp_path.replace(self.registry_path)
        logger.debug("saved registry to %s", self.registry_path)

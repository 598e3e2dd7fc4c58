"""Lookup table deciding how the copier treats a file."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict

from .config import SyncConfig


class FileTreatment(Enum):
    """How a file is carried into a cloned workspace."""

    # Workspace name substituted case-insensitively; skipped when tagged.
    TEXT = "text"
    # Workspace name substituted in original and lower-cased form; skipped when tagged.
    CONTAINER = "container"
    # Byte-identical copy, only when the target does not exist yet.
    BINARY = "binary"

    @property
    def skip_if_tagged(self) -> bool:
        return self is not FileTreatment.BINARY


class TreatmentTable:
    """Maps file names and extensions to a :class:`FileTreatment`."""

    def __init__(self, config: SyncConfig | None = None) -> None:
        config = config or SyncConfig()
        self._by_name: Dict[str, FileTreatment] = {}
        self._by_extension: Dict[str, FileTreatment] = {}
        for extension in config.replace_extensions:
            self._by_extension[extension.lower()] = FileTreatment.TEXT
        for name in config.replace_files:
            self._by_name[name.lower()] = FileTreatment.TEXT
        for name in config.container_files:
            self._by_name[name.lower()] = FileTreatment.CONTAINER

    def lookup(self, path: Path) -> FileTreatment:
        by_name = self._by_name.get(path.name.lower())
        if by_name is not None:
            return by_name
        return self._by_extension.get(path.suffix.lower(), FileTreatment.BINARY)


__all__ = ["FileTreatment", "TreatmentTable"]

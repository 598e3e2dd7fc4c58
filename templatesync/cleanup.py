"""Generated-file removal and directory cleaning."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Sequence

from .config import SyncConfig
from .labels import Label
from .logging import get_logger
from .scanner import find_labeled_files

logger = get_logger("cleanup")


def delete_generated_files(root: Path, config: SyncConfig | None = None) -> List[Path]:
    """Delete every ``GeneratedCode`` file matching the generated-source patterns."""
    config = config or SyncConfig()
    deleted: List[Path] = []
    if not root.is_dir():
        return deleted
    for pattern in config.generated_patterns:
        for path in find_labeled_files(root, pattern, Label.GENERATED_CODE, config):
            if path in deleted:
                continue
            try:
                path.unlink()
            except OSError as exc:
                logger.warning("Cannot delete generated file %s: %s", path, exc)
                continue
            deleted.append(path)
    logger.debug("Deleted %d generated files below %s", len(deleted), root)
    return deleted


def clean_directories(root: Path, drop_folders: Sequence[str]) -> List[Path]:
    """Remove ``drop_folders`` and empty directories below ``root``; return removed paths."""
    removed: List[Path] = []

    def _clean(directory: Path) -> int:
        try:
            file_count = sum(1 for entry in directory.iterdir() if not entry.is_dir())
            children = sorted(entry for entry in directory.iterdir() if entry.is_dir())
        except OSError as exc:
            logger.warning("Cannot list %s: %s", directory, exc)
            return 1
        for child in children:
            child_count = _clean(child)
            try:
                if child.name in drop_folders:
                    shutil.rmtree(child)
                    removed.append(child)
                    child_count = 0
                elif child_count == 0:
                    child.rmdir()
                    removed.append(child)
            except OSError as exc:
                logger.warning("Cannot remove %s: %s", child, exc)
            file_count += child_count
        return file_count

    if root.is_dir():
        _clean(root)
    return removed


__all__ = ["clean_directories", "delete_generated_files"]

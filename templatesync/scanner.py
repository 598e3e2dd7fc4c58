"""File enumeration and workspace discovery."""

from __future__ import annotations

import os
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import SyncConfig
from .labels import has_label
from .logging import get_logger
from .paths import find_manifest_file

logger = get_logger("scanner")


def iter_files(root: Path, pattern: str, config: SyncConfig) -> Iterator[Path]:
    """Yield files below ``root`` whose name matches ``pattern``, skipping ignore folders."""
    ignored = set(config.ignore_folders)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in ignored)
        current_dir = Path(dirpath)
        for filename in sorted(filenames):
            if fnmatch(filename, pattern):
                yield current_dir / filename


def find_labeled_files(root: Path, pattern: str, label: str, config: SyncConfig) -> List[Path]:
    """Return files matching ``pattern`` whose first non-blank line contains ``label``."""
    result: List[Path] = []
    for path in iter_files(root, pattern, config):
        try:
            if has_label(path, label):
                result.append(path)
        except OSError as exc:
            logger.warning("Cannot read %s: %s", path, exc)
    return sorted(result)


def discover_workspaces(repos_path: Path, config: SyncConfig, *, max_depth: int = 3) -> List[Path]:
    """Return directories up to ``max_depth`` levels below ``repos_path`` holding a workspace manifest."""
    result: List[Path] = []
    extensions = [config.workspace_manifest_extension]
    excluded = set(config.ignore_folders) | set(config.tooling_folders)

    def _visit(directory: Path, depth: int) -> None:
        if directory.name.startswith(".") and depth > 0:
            return
        if find_manifest_file(directory, extensions) is not None:
            result.append(directory)
        if depth >= max_depth:
            return
        try:
            children = sorted(child for child in directory.iterdir() if child.is_dir())
        except OSError as exc:
            logger.debug("Skipping %s: %s", directory, exc)
            return
        for child in children:
            if child.name not in excluded:
                _visit(child, depth + 1)

    if repos_path.is_dir():
        _visit(repos_path, 0)
    return result


def module_directories(root: Path, module_names: Sequence[str], config: SyncConfig) -> List[Path]:
    """Return directories below ``root`` whose trailing path segments equal a requested module name."""
    result: List[Path] = []
    ignored = set(config.ignore_folders)
    for dirpath, dirnames, _ in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in ignored)
        current_dir = Path(dirpath)
        if current_dir == root:
            continue
        relative = current_dir.relative_to(root).as_posix()
        if any(relative == name or relative.endswith(f"/{name}") for name in module_names):
            result.append(current_dir)
    return result


__all__ = ["discover_workspaces", "find_labeled_files", "iter_files", "module_directories"]

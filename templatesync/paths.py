"""Path classification and source/target correspondence resolution."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from .config import SyncConfig
from .logging import get_logger
from .models import CorrespondenceMapping, Module, PathScope, Workspace

logger = get_logger("paths")


def find_manifest_file(directory: Path, extensions: Iterable[str]) -> Optional[Path]:
    """Return the first manifest file (sorted by name) in ``directory`` or None."""
    wanted = {extension.lower() for extension in extensions}
    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return None
    for entry in entries:
        if entry.suffix.lower() in wanted and entry.is_file():
            return entry
    return None


def _ancestors(path: Path, stop: Path | None = None) -> Iterator[Path]:
    current = path if path.is_dir() else path.parent
    while True:
        yield current
        if stop is not None and current == stop:
            return
        if current.parent == current:
            return
        current = current.parent


def find_manifest_upward(
    path: Path, extensions: Sequence[str], *, stop: Path | None = None
) -> Optional[Path]:
    """Walk upward from ``path`` until a directory holds a manifest of the given kind."""
    for directory in _ancestors(path, stop):
        manifest = find_manifest_file(directory, extensions)
        if manifest is not None:
            return manifest
    return None


def sub_path(path: Path, extensions: Sequence[str]) -> Optional[Path]:
    """Return ``path`` relative to the directory of its nearest manifest of the given kind."""
    manifest = find_manifest_upward(path, extensions)
    if manifest is None:
        return None
    return path.relative_to(manifest.parent)


class PathClassifier:
    """Decides which correspondence mode applies to a source file and a target path."""

    def __init__(self, config: SyncConfig | None = None) -> None:
        self.config = config or SyncConfig()

    @property
    def _workspace_extensions(self) -> list[str]:
        return [self.config.workspace_manifest_extension]

    def find_workspace(self, path: Path) -> Optional[Workspace]:
        manifest = find_manifest_upward(path, self._workspace_extensions)
        if manifest is None:
            return None
        return Workspace(name=manifest.stem, root=manifest.parent, manifest_path=manifest)

    def find_module(self, path: Path, workspace: Workspace | None = None) -> Optional[Module]:
        """Return the module enclosing ``path``, bounded by the workspace root when given."""
        stop = workspace.root if workspace is not None else None
        manifest = find_manifest_upward(path, self.config.module_manifest_extensions, stop=stop)
        if manifest is None:
            return None
        if stop is not None and not _is_within(manifest.parent, stop):
            return None
        return Module(name=manifest.parent.name, directory=manifest.parent, manifest_path=manifest)

    def module_sub_path(self, path: Path) -> Optional[Path]:
        return sub_path(path, self.config.module_manifest_extensions)

    def workspace_sub_path(self, path: Path) -> Optional[Path]:
        return sub_path(path, self._workspace_extensions)

    def classify_target(self, target: Path) -> PathScope:
        """Classify a target directory as module root, workspace root or workspace sub-path."""
        workspace = self.find_workspace(target)
        module = self.find_module(target, workspace)
        if module is not None and module.directory == target:
            return PathScope.MODULE
        if workspace is None:
            return PathScope.NONE
        if workspace.root == target:
            return PathScope.WORKSPACE_ROOT
        return PathScope.WORKSPACE_SUBPATH

    def classify_source(self, source_file: Path) -> PathScope:
        workspace = self.find_workspace(source_file)
        if workspace is None:
            return PathScope.NONE
        if self.find_module(source_file, workspace) is not None:
            return PathScope.MODULE
        if source_file.parent == workspace.root:
            return PathScope.WORKSPACE_ROOT
        return PathScope.WORKSPACE_SUBPATH

    def resolve(self, source_file: Path, target: Path) -> Optional[CorrespondenceMapping]:
        """Map ``source_file`` into ``target`` or return None when no mode applies."""
        source_workspace = self.find_workspace(source_file)
        target_workspace = self.find_workspace(target)
        if source_workspace is None or target_workspace is None:
            return None

        target_scope = self.classify_target(target)
        source_module = self.find_module(source_file, source_workspace)

        if source_module is not None:
            relative = source_file.relative_to(source_module.directory)
            expected_name = source_module.name.replace(source_workspace.name, target_workspace.name)

            if target_scope is PathScope.MODULE:
                if target.name != expected_name:
                    return None
                target_file = target / relative
            elif target_scope is PathScope.WORKSPACE_ROOT:
                module_dir = target / expected_name
                if find_manifest_file(module_dir, self.config.module_manifest_extensions) is None:
                    logger.debug("No target module %s for %s", module_dir, source_file)
                    return None
                target_file = module_dir / relative
            else:
                target_file = self._module_sub_path_target(
                    source_module, relative, expected_name, target, target_workspace
                )
                if target_file is None:
                    return None
            scope = PathScope.MODULE
        else:
            if target_scope not in (PathScope.WORKSPACE_ROOT, PathScope.WORKSPACE_SUBPATH):
                return None
            target_file = target / source_file.relative_to(source_workspace.root)
            scope = target_scope

        return CorrespondenceMapping(
            source=source_file,
            target=target_file,
            scope=scope,
            source_workspace=source_workspace,
            target_workspace=target_workspace,
        )

    def _module_sub_path_target(
        self,
        source_module: Module,
        relative: Path,
        expected_name: str,
        target: Path,
        target_workspace: Workspace,
    ) -> Optional[Path]:
        """Map into a directory inside a front-end module, e.g. ``Widgets.AngularApp/src``.

        Only files below the same sub-directory of the source module are mapped.
        """
        kinds = {extension.lower() for extension in self.config.subpath_manifest_extensions}
        target_module = self.find_module(target, target_workspace)
        if target_module is None or target_module.name != expected_name:
            return None
        if source_module.kind not in kinds or target_module.kind not in kinds:
            return None
        if not _is_within(relative, target.relative_to(target_module.directory)):
            return None
        return target_module.directory / relative


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


__all__ = [
    "PathClassifier",
    "find_manifest_file",
    "find_manifest_upward",
    "sub_path",
]

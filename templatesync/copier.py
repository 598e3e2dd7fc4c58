"""Structural cloning of a workspace into a new, renamed workspace."""

from __future__ import annotations

import os
import re
import shutil
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .cleanup import delete_generated_files
from .config import SyncConfig
from .labels import Label, is_tagged_skip, read_lines, relabel_lines, write_lines
from .logging import get_logger
from .manifest import ModuleGuidRemapper, WorkspaceManifestEditor, list_module_names, regenerate_user_secrets
from .models import CopyResult
from .paths import find_manifest_file
from .scanner import module_directories
from .treatment import FileTreatment, TreatmentTable


def file_extension(path: Path) -> str:
    """Return the lower-cased extension, treating dot-files such as ``.gitignore`` as one."""
    if path.suffix:
        return path.suffix.lower()
    if path.name.startswith("."):
        return path.name.lower()
    return ""


class Copier:
    """Clones a workspace: rewritten manifest, loose files and the requested modules."""

    def __init__(
        self,
        config: SyncConfig | None = None,
        *,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.config = config or SyncConfig()
        self.treatments = TreatmentTable(self.config)
        self.editor = WorkspaceManifestEditor(self.config, id_factory=id_factory)
        self.guid_remapper = ModuleGuidRemapper(id_factory=id_factory)
        self.logger = get_logger("copier")

    def copy(
        self,
        source_root: str | Path,
        target_root: str | Path,
        module_names: Optional[Iterable[str]] = None,
    ) -> CopyResult:
        """Clone ``source_root`` into ``target_root`` keeping only ``module_names``."""
        result = CopyResult()
        if not str(source_root).strip() or not str(target_root).strip():
            self.logger.warning("Source and target paths must not be empty; nothing copied")
            return result

        source = Path(source_root).expanduser().resolve()
        target = Path(target_root).expanduser().resolve()
        self.logger.info("Source workspace: %s", source)
        self.logger.info("Target directory: %s", target)

        if source == target:
            self.logger.warning("Source and target are the same directory; nothing copied")
            return result

        source_manifest = find_manifest_file(source, [self.config.workspace_manifest_extension])
        if source_manifest is None:
            self.logger.warning("No workspace manifest found in %s; nothing copied", source)
            return result

        source_name = source_manifest.stem
        target_name = target.name
        try:
            manifest_text = source_manifest.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.warning("Cannot read workspace manifest %s: %s; nothing copied", source_manifest, exc)
            return result
        modules = list(module_names) if module_names is not None else list_module_names(manifest_text, self.config)
        self.logger.debug("Copying modules: %s", ", ".join(modules) or "(none)")

        target.mkdir(parents=True, exist_ok=True)

        self._copy_manifest(manifest_text, target, source_name, target_name, modules, result)
        self._copy_workspace_files(source, target, source_name, target_name, result)
        for directory in module_directories(source, modules, self.config):
            self._copy_module_directory(directory, source, target, source_name, target_name, result)

        delete_generated_files(target, self.config)

        if result.succeeded:
            self.logger.info("Finished copying %d files to %s", len(result.copied), target)
        else:
            self.logger.warning("Finished with %d failed files; re-run to retry", len(result.failed))
        return result

    # ------------------------------------------------------------------
    # Steps

    def _copy_manifest(
        self,
        manifest_text: str,
        target: Path,
        source_name: str,
        target_name: str,
        modules: List[str],
        result: CopyResult,
    ) -> None:
        target_manifest = target / f"{target_name}{self.config.workspace_manifest_extension}"
        edit = self.editor.transform(manifest_text, source_name, target_name, modules)
        try:
            write_lines(target_manifest, edit.text.splitlines())
        except OSError as exc:
            self.logger.warning("Cannot write manifest %s: %s", target_manifest, exc)
            result.failed.append(target_manifest)
            return
        result.target_manifest = target_manifest
        result.module_ids.update(edit.module_ids)
        result.id_map.update(edit.id_map)

    def _copy_workspace_files(
        self, source: Path, target: Path, source_name: str, target_name: str, result: CopyResult
    ) -> None:
        extensions = {extension.lower() for extension in self.config.workspace_extensions}
        skip_names = {name.lower() for name in self.config.workspace_skip_files}
        folders = [source] + [source / name for name in self.config.tooling_folders]

        for folder in folders:
            if not folder.is_dir():
                continue
            for path in sorted(folder.iterdir()):
                if not path.is_file() or path.name.lower() in skip_names:
                    continue
                if file_extension(path) not in extensions:
                    continue
                target_file = self._target_path(path, source, target, source_name, target_name)
                self._copy_file(path, target_file, source_name, target_name, target, result)

    def _copy_module_directory(
        self,
        directory: Path,
        source: Path,
        target: Path,
        source_name: str,
        target_name: str,
        result: CopyResult,
    ) -> None:
        extensions = {extension.lower() for extension in self.config.module_extensions}
        container_names = {name.lower() for name in self.config.container_files}

        for path in sorted(directory.rglob("*")):
            if not path.is_file() or self.config.is_ignored(path, root=source):
                continue
            if path.name.lower() not in container_names and file_extension(path) not in extensions:
                continue
            target_file = self._target_path(path, source, target, source_name, target_name)
            self._copy_file(path, target_file, source_name, target_name, target, result)

    # ------------------------------------------------------------------
    # File helpers

    @staticmethod
    def _target_path(path: Path, source: Path, target: Path, source_name: str, target_name: str) -> Path:
        result = target
        for part in path.relative_to(source).parts:
            result = result / part.replace(source_name, target_name)
        return result

    def _copy_file(
        self,
        source_file: Path,
        target_file: Path,
        source_name: str,
        target_name: str,
        target_root: Path,
        result: CopyResult,
    ) -> None:
        treatment = self.treatments.lookup(source_file)
        try:
            if treatment is FileTreatment.BINARY:
                if target_file.exists():
                    result.skipped.append(target_file)
                    return
                target_file.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(source_file, target_file)
                result.copied.append(target_file)
                return

            lines = read_lines(source_file)
            if treatment.skip_if_tagged and is_tagged_skip(lines):
                self.logger.debug("Skipping tagged file %s", source_file)
                result.skipped.append(target_file)
                return

            if treatment is FileTreatment.CONTAINER:
                lines = [
                    line.replace(source_name, target_name).replace(source_name.lower(), target_name.lower())
                    for line in lines
                ]
            else:
                lines = self._substitute(source_file, lines, source_name, target_name, target_root)

            write_lines(target_file, lines)
            if file_extension(target_file) in {ext.lower() for ext in self.config.module_manifest_extensions}:
                self.guid_remapper.remap_file(target_file, result.id_map)
            result.copied.append(target_file)
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.warning("Cannot copy %s: %s", source_file, exc)
            result.failed.append(source_file)

    def _substitute(
        self,
        source_file: Path,
        lines: List[str],
        source_name: str,
        target_name: str,
        target_root: Path,
    ) -> List[str]:
        if any(source_file.name.endswith(suffix) for suffix in self.config.user_secrets_manifests):
            lines = regenerate_user_secrets(lines)

        pattern = re.compile(re.escape(source_name), re.IGNORECASE)
        token = self.config.workspace_path_token
        replacement_path = f"{target_root}{os.sep}"

        converted: List[str] = []
        for line in lines:
            line = pattern.sub(lambda _: target_name, line)
            if token:
                line = line.replace(token, replacement_path)
            converted.append(line)
        return relabel_lines(converted, Label.BASE_CODE, Label.CODE_COPY)


__all__ = ["Copier", "file_extension"]

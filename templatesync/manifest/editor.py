"""Workspace manifest filtering, renaming and identifier regeneration."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Optional, Set

from ..config import SyncConfig
from ..logging import get_logger
from .parser import (
    GUID_RE,
    GlobalSection,
    ItemsBlock,
    MemberEntry,
    ModuleRefBlock,
    WorkspaceManifest,
    parse_manifest,
    render_manifest,
)

logger = get_logger("manifest.editor")

BUILD_FLAGS_SECTION = "ProjectConfigurationPlatforms"
NESTING_SECTION = "NestedProjects"


def new_identifier() -> str:
    return str(uuid.uuid4()).upper()


@dataclass
class ManifestEdit:
    """Rewritten manifest text plus the identifiers assigned to kept modules."""

    text: str
    module_ids: Dict[str, str] = field(default_factory=dict)
    id_map: Dict[str, str] = field(default_factory=dict)


def list_module_names(text: str, config: SyncConfig | None = None) -> List[str]:
    """Return the names of module references whose path points at a module manifest."""
    config = config or SyncConfig()
    extensions = tuple(extension.lower() for extension in config.module_manifest_extensions)
    return [
        module.name
        for module in parse_manifest(text).modules
        if module.path.lower().endswith(extensions)
    ]


class WorkspaceManifestEditor:
    """Keeps only requested modules, assigns fresh ids and renames the workspace token."""

    def __init__(
        self,
        config: SyncConfig | None = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.config = config or SyncConfig()
        self._id_factory = id_factory or new_identifier

    def transform(
        self,
        text: str,
        source_name: str,
        target_name: str,
        module_names: Iterable[str],
    ) -> ManifestEdit:
        manifest = parse_manifest(text)
        requested = set(module_names)
        pattern = re.compile(re.escape(source_name), re.IGNORECASE) if source_name else None

        def _rename(value: str) -> str:
            if pattern is None:
                return value
            return pattern.sub(lambda _: target_name, value)

        used_ids: Set[str] = {entry.identifier.upper() for entry in manifest.entries}
        id_map: Dict[str, str] = {}
        module_ids: Dict[str, str] = {}
        kept: List[MemberEntry] = []
        modules: List[ModuleRefBlock] = []

        for entry in manifest.entries:
            if isinstance(entry, ItemsBlock):
                kept.append(entry)
                continue
            if entry.name not in requested:
                logger.debug("Dropping module %s from manifest", entry.name)
                continue
            fresh = self._fresh_id(used_ids)
            id_map[entry.identifier.upper()] = fresh
            renamed = replace(entry, name=_rename(entry.name), path=_rename(entry.path), identifier=fresh)
            module_ids[renamed.name] = fresh
            kept.append(renamed)
            modules.append(renamed)

        known_ids = set(id_map) | {
            entry.identifier.upper() for entry in kept if isinstance(entry, ItemsBlock)
        }
        for module in modules:
            module.body = _remap_lines(module.body, id_map, known_ids, keep_unmapped=False)

        sections = [self._convert_section(section, id_map, known_ids) for section in manifest.sections]
        result = WorkspaceManifest(preamble=manifest.preamble, entries=kept, sections=sections)
        rendered = render_manifest(result, self.config.workspace_extensions)
        return ManifestEdit(text=rendered, module_ids=module_ids, id_map=id_map)

    def _fresh_id(self, used_ids: Set[str]) -> str:
        while True:
            candidate = self._id_factory().upper()
            if candidate not in used_ids:
                used_ids.add(candidate)
                return candidate

    def _convert_section(
        self, section: GlobalSection, id_map: Dict[str, str], known_ids: Set[str]
    ) -> GlobalSection:
        if section.name == BUILD_FLAGS_SECTION:
            lines: List[str] = []
            for line in section.lines:
                match = GUID_RE.search(line)
                if match is None:
                    continue
                fresh = id_map.get(match.group("guid").upper())
                if fresh is not None:
                    lines.append(line[: match.start("guid")] + fresh + line[match.end("guid") :])
            return GlobalSection(header=section.header, lines=lines)
        if section.name == NESTING_SECTION:
            return GlobalSection(
                header=section.header,
                lines=_remap_lines(section.lines, id_map, known_ids, keep_unmapped=False),
            )
        return GlobalSection(
            header=section.header,
            lines=_remap_lines(section.lines, id_map, known_ids, keep_unmapped=True),
        )


def _remap_lines(
    lines: Iterable[str], id_map: Dict[str, str], known_ids: Set[str], *, keep_unmapped: bool
) -> List[str]:
    """Swap old ids for fresh ones; drop lines naming unknown ids unless ``keep_unmapped``."""
    result: List[str] = []
    for line in lines:
        guids = [match.group("guid").upper() for match in GUID_RE.finditer(line)]
        if not keep_unmapped and guids and not all(guid in known_ids for guid in guids):
            continue
        result.append(
            GUID_RE.sub(
                lambda match: "{" + id_map.get(match.group("guid").upper(), match.group("guid")) + "}",
                line,
            )
        )
    return result


__all__ = ["ManifestEdit", "WorkspaceManifestEditor", "list_module_names", "new_identifier"]

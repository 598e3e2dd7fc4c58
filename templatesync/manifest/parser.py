"""Tolerant line parser for workspace manifests.

A manifest is modelled as a small tagged union: the preamble (everything before the
first member entry), a list of member entries (loose-item groups or module references)
and the trailing global sections. Anything the parser does not understand is dropped
rather than raised, so a malformed manifest degrades to a near-empty one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PureWindowsPath
from typing import Iterable, List, Optional, Sequence, Union

from ..logging import get_logger

logger = get_logger("manifest")

_ENTRY_RE = re.compile(
    r'^Project\("\{(?P<type_id>[^}]*)\}"\)\s*=\s*'
    r'"(?P<name>[^"]*)"\s*,\s*"(?P<path>[^"]*)"\s*,\s*"\{(?P<identifier>[^}]*)\}"'
)
_SECTION_RE = re.compile(r"^GlobalSection\((?P<name>[^)]*)\)")
GUID_RE = re.compile(r"\{(?P<guid>[0-9A-Fa-f-]{36})\}")

ITEMS_SECTION_PREFIX = "ProjectSection(SolutionItems)"


@dataclass
class Preamble:
    lines: List[str] = field(default_factory=list)


@dataclass
class ItemsBlock:
    """Loose-item group: a named folder listing ``name = path`` items."""

    type_id: str
    name: str
    path: str
    identifier: str
    body: List[str] = field(default_factory=list)

    def render(self, item_extensions: Iterable[str] = ()) -> List[str]:
        extensions = {extension.lower() for extension in item_extensions}
        lines = [_entry_header(self.type_id, self.name, self.path, self.identifier)]
        for line in self.body:
            if "=" in line and not line.startswith("ProjectSection("):
                item_path = line.split("=", 1)[1].strip()
                suffix = PureWindowsPath(item_path).suffix.lower()
                if suffix and suffix in extensions:
                    lines.append(f"\t\t{line}")
                    continue
            lines.append(f"\t{line}")
        lines.append("EndProject")
        return lines


@dataclass
class ModuleRefBlock:
    """Reference to a module manifest with its unique identifier."""

    type_id: str
    name: str
    path: str
    identifier: str
    body: List[str] = field(default_factory=list)

    def render(self) -> List[str]:
        lines = [_entry_header(self.type_id, self.name, self.path, self.identifier)]
        for line in self.body:
            if line.startswith(("ProjectSection(", "EndProjectSection")):
                lines.append(f"\t{line}")
            else:
                lines.append(f"\t\t{line}")
        lines.append("EndProject")
        return lines


@dataclass
class GlobalSection:
    header: str
    lines: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        match = _SECTION_RE.match(self.header)
        return match.group("name") if match else ""

    def render(self) -> List[str]:
        return [f"\t{self.header}", *self.lines, "\tEndGlobalSection"]


MemberEntry = Union[ItemsBlock, ModuleRefBlock]


@dataclass
class WorkspaceManifest:
    preamble: Preamble = field(default_factory=Preamble)
    entries: List[MemberEntry] = field(default_factory=list)
    sections: List[GlobalSection] = field(default_factory=list)

    @property
    def modules(self) -> List[ModuleRefBlock]:
        return [entry for entry in self.entries if isinstance(entry, ModuleRefBlock)]


def _entry_header(type_id: str, name: str, path: str, identifier: str) -> str:
    return f'Project("{{{type_id}}}") = "{name}", "{path}", "{{{identifier}}}"'


def _build_entry(header: str, body: Sequence[str]) -> Optional[MemberEntry]:
    match = _ENTRY_RE.match(header)
    if match is None:
        logger.debug("Dropping unparseable member entry: %s", header)
        return None
    fields = match.groupdict()
    if body and body[0].startswith(ITEMS_SECTION_PREFIX):
        return ItemsBlock(body=list(body), **fields)
    return ModuleRefBlock(body=list(body), **fields)


def parse_manifest(text: str) -> WorkspaceManifest:
    """Parse manifest text into its preamble, member entries and global sections."""
    manifest = WorkspaceManifest()
    header: Optional[str] = None
    body: List[str] = []
    section: Optional[GlobalSection] = None
    in_preamble = True

    def _close_entry() -> None:
        nonlocal header, body
        if header is not None:
            entry = _build_entry(header, body)
            if entry is not None:
                manifest.entries.append(entry)
        header = None
        body = []

    for raw in text.splitlines():
        stripped = raw.strip()

        if header is not None:
            if stripped == "EndProject":
                _close_entry()
                continue
            if not stripped.startswith("Project("):
                if stripped:
                    body.append(stripped)
                continue
            # Unterminated entry: close it and treat this line as the next header.
            _close_entry()

        if section is not None:
            if stripped == "EndGlobalSection":
                manifest.sections.append(section)
                section = None
            else:
                section.lines.append(raw)
            continue

        if stripped.startswith("Project("):
            in_preamble = False
            header = stripped
            continue
        if stripped.startswith("GlobalSection("):
            in_preamble = False
            section = GlobalSection(header=stripped)
            continue
        if stripped in ("Global", "EndGlobal"):
            in_preamble = False
            continue
        if in_preamble:
            manifest.preamble.lines.append(raw)

    _close_entry()
    if section is not None:
        manifest.sections.append(section)
    return manifest


def render_manifest(manifest: WorkspaceManifest, item_extensions: Iterable[str] = ()) -> str:
    """Serialize a manifest back to text with ``\\n`` line endings."""
    extensions = list(item_extensions)
    lines: List[str] = list(manifest.preamble.lines)
    for entry in manifest.entries:
        if isinstance(entry, ItemsBlock):
            lines.extend(entry.render(extensions))
        else:
            lines.extend(entry.render())
    lines.append("Global")
    for section in manifest.sections:
        lines.extend(section.render())
    lines.append("EndGlobal")
    return "\n".join(lines) + "\n"


__all__ = [
    "GUID_RE",
    "GlobalSection",
    "ItemsBlock",
    "MemberEntry",
    "ModuleRefBlock",
    "Preamble",
    "WorkspaceManifest",
    "parse_manifest",
    "render_manifest",
]

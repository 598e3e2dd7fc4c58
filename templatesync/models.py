"""Core data models shared across templatesync components."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional


class PathScope(Enum):
    """How a path relates to the nearest workspace and module manifests."""

    MODULE = "module"
    WORKSPACE_ROOT = "workspace_root"
    WORKSPACE_SUBPATH = "workspace_subpath"
    NONE = "none"


@dataclass(frozen=True)
class Workspace:
    """Directory holding exactly one workspace manifest."""

    name: str
    root: Path
    manifest_path: Path


@dataclass(frozen=True)
class Module:
    """Independently buildable unit identified by its own manifest."""

    name: str
    directory: Path
    manifest_path: Path
    identifier: Optional[str] = None

    @property
    def kind(self) -> str:
        return self.manifest_path.suffix.lower()


@dataclass(frozen=True)
class CorrespondenceMapping:
    """Pairing of a source file with its counterpart location in a target."""

    source: Path
    target: Path
    scope: PathScope
    source_workspace: Workspace
    target_workspace: Workspace


@dataclass
class BalanceResult:
    """Files touched by a balance pass."""

    written: List[Path] = field(default_factory=list)
    deleted: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.written or self.deleted)


@dataclass
class CopyResult:
    """Outcome of cloning a workspace."""

    target_manifest: Optional[Path] = None
    copied: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)
    module_ids: Dict[str, str] = field(default_factory=dict)
    # Old module id -> id assigned in the target workspace manifest.
    id_map: Dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failed

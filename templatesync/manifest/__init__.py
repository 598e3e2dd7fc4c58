"""Workspace and module manifest handling."""

from .editor import ManifestEdit, WorkspaceManifestEditor, list_module_names
from .module import ModuleGuidRemapper, regenerate_user_secrets
from .parser import (
    GlobalSection,
    ItemsBlock,
    ModuleRefBlock,
    Preamble,
    WorkspaceManifest,
    parse_manifest,
    render_manifest,
)

__all__ = [
    "GlobalSection",
    "ItemsBlock",
    "ManifestEdit",
    "ModuleGuidRemapper",
    "ModuleRefBlock",
    "Preamble",
    "WorkspaceManifest",
    "WorkspaceManifestEditor",
    "list_module_names",
    "parse_manifest",
    "regenerate_user_secrets",
    "render_manifest",
]

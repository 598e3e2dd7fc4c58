"""Configuration loading for templatesync (.templatesync.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".templatesync.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


_REPLACE_EXTENSIONS = [
    ".asax",
    ".axaml",
    ".config",
    ".cs",
    ".cshtml",
    ".csproj",
    ".csv",
    ".css",
    ".esproj",
    ".html",
    ".js",
    ".less",
    ".manifest",
    ".md",
    ".razor",
    ".sln",
    ".template",
    ".tt",
    ".ts",
    ".txt",
    ".xaml",
    ".xml",
]

_REPLACE_FILES = [
    "appsettings.json",
    "appsettings.Development.json",
    "launchSettings.json",
    "launch.json",
    "tasks.json",
    "copilot-instructions.md",
]

_MODULE_EXTENSIONS = [
    ".asax",
    ".axaml",
    ".config",
    ".cs",
    ".cshtml",
    ".csproj",
    ".csv",
    ".css",
    ".esproj",
    ".html",
    ".ico",
    ".jpg",
    ".js",
    ".json",
    ".less",
    ".manifest",
    ".md",
    ".png",
    ".razor",
    ".scss",
    ".template",
    ".tt",
    ".ts",
    ".txt",
    ".xaml",
    ".xml",
]

_WORKSPACE_EXTENSIONS = [
    ".cd",
    ".cmd",
    ".csv",
    ".html",
    ".jpg",
    ".json",
    ".md",
    ".pdf",
    ".png",
    ".sql",
    ".ts",
    ".txt",
    ".yml",
    ".yaml",
    ".gitignore",
    ".gitattributes",
]

_IGNORE_FOLDERS = [".angular", ".vs", ".git", "bin", "obj", "node_modules", "Migrations"]

_DROP_FOLDERS = ["bin", "obj", "node_modules", ".angular", ".vs"]

_GENERATED_PATTERNS = [
    "*.cs",
    "*.ts",
    "*.css",
    "*.html",
    "*.cshtml",
    "*.razor",
    "*.razor.cs",
    "*.template",
    "*.puml",
    "*.axaml",
]


@dataclass
class BalanceDefaults:
    """Label pairs and file patterns used when a balance call omits them."""

    source_labels: List[str] = field(default_factory=lambda: ["BaseCode", "BaseCode"])
    target_labels: List[str] = field(default_factory=lambda: ["CodeCopy", "BaseCode"])
    patterns: List[str] = field(default_factory=lambda: list(_GENERATED_PATTERNS))


@dataclass
class SyncConfig:
    """Allow-lists, denylists and defaults shared by the copier and synchronizer."""

    workspace_manifest_extension: str = ".sln"
    module_manifest_extensions: List[str] = field(default_factory=lambda: [".csproj", ".esproj"])
    # Module kinds whose sub-directories can be balance targets on their own.
    subpath_manifest_extensions: List[str] = field(default_factory=lambda: [".esproj"])
    replace_extensions: List[str] = field(default_factory=lambda: list(_REPLACE_EXTENSIONS))
    replace_files: List[str] = field(default_factory=lambda: list(_REPLACE_FILES))
    module_extensions: List[str] = field(default_factory=lambda: list(_MODULE_EXTENSIONS))
    workspace_extensions: List[str] = field(default_factory=lambda: list(_WORKSPACE_EXTENSIONS))
    container_files: List[str] = field(default_factory=lambda: ["dockerfile", "docker-compose.yml"])
    tooling_folders: List[str] = field(default_factory=lambda: [".vscode", ".github"])
    workspace_skip_files: List[str] = field(default_factory=lambda: ["README.md"])
    ignore_folders: List[str] = field(default_factory=lambda: list(_IGNORE_FOLDERS))
    drop_folders: List[str] = field(default_factory=lambda: list(_DROP_FOLDERS))
    generated_patterns: List[str] = field(default_factory=lambda: list(_GENERATED_PATTERNS))
    user_secrets_manifests: List[str] = field(default_factory=lambda: ["BlazorApp.csproj"])
    workspace_path_token: Optional[str] = None
    balance: BalanceDefaults = field(default_factory=BalanceDefaults)

    def is_ignored(self, path: Path, root: Path | None = None) -> bool:
        """Return True when any segment of ``path`` below ``root`` is an ignore folder."""
        if root is not None:
            try:
                path = path.relative_to(root)
            except ValueError:
                pass
        return any(part in self.ignore_folders for part in path.parts)


def load_config(config_path: Path) -> SyncConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(Path(config_path))

    if not config_file.exists():
        return SyncConfig()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = SyncConfig()

    manifest_data = _as_dict(data.get("manifests"))
    if manifest_data:
        workspace_ext = _as_str(manifest_data.get("workspace"))
        if workspace_ext:
            config.workspace_manifest_extension = workspace_ext
        module_exts = _as_str_list(manifest_data.get("module"))
        if module_exts:
            config.module_manifest_extensions = module_exts
        _override_list(config, "subpath_manifest_extensions", manifest_data.get("subpath"))

    extension_data = _as_dict(data.get("extensions"))
    if extension_data:
        _override_list(config, "replace_extensions", extension_data.get("replace"))
        _override_list(config, "module_extensions", extension_data.get("module"))
        _override_list(config, "workspace_extensions", extension_data.get("workspace"))

    file_data = _as_dict(data.get("files"))
    if file_data:
        _override_list(config, "replace_files", file_data.get("replace"))
        _override_list(config, "container_files", file_data.get("container"))
        _override_list(config, "workspace_skip_files", file_data.get("skip"))
        _override_list(config, "user_secrets_manifests", file_data.get("user_secrets"))

    folder_data = _as_dict(data.get("folders"))
    if folder_data:
        _override_list(config, "ignore_folders", folder_data.get("ignore"))
        _override_list(config, "tooling_folders", folder_data.get("tooling"))
        _override_list(config, "drop_folders", folder_data.get("drop"))

    _override_list(config, "generated_patterns", data.get("generated_patterns"))
    config.workspace_path_token = _as_str(data.get("workspace_path_token"))

    balance_data = _as_dict(data.get("balance"))
    if balance_data:
        _override_list(config.balance, "source_labels", balance_data.get("source_labels"))
        _override_list(config.balance, "target_labels", balance_data.get("target_labels"))
        _override_list(config.balance, "patterns", balance_data.get("patterns"))

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _override_list(target: object, attribute: str, value: Any) -> None:
    items = _as_str_list(value)
    if items:
        setattr(target, attribute, items)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["BalanceDefaults", "ConfigError", "SyncConfig", "load_config", "CONFIG_FILENAME"]

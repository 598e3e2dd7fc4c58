"""Identifier rewriting inside module manifests."""

from __future__ import annotations

import re
import uuid
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

from ..labels import write_lines
from ..logging import get_logger

logger = get_logger("manifest.module")

_PROJECT_GUID_RE = re.compile(r"(<ProjectGuid>\s*\{?)(?P<guid>[0-9A-Fa-f-]{36})(\}?\s*</ProjectGuid>)")
_USER_SECRETS_PREFIX = "<UserSecretsId>"


class ModuleGuidRemapper:
    """Replaces a module's unique identifier inside its manifest.

    Identifiers found in ``id_map`` (old id to new id, upper case) are reused so the
    module manifest agrees with the workspace manifest; any other identifier gets a
    fresh one.
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None) -> None:
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()).upper())

    def remap_text(
        self, text: str, id_map: Optional[Mapping[str, str]] = None
    ) -> tuple[str, Dict[str, str]]:
        """Return ``text`` with every ``<ProjectGuid>`` replaced and the old→new mapping."""
        known = {old.upper(): new for old, new in (id_map or {}).items()}
        mapping: Dict[str, str] = {}

        def _swap(match: re.Match[str]) -> str:
            old = match.group("guid").upper()
            fresh = mapping.get(old) or known.get(old)
            if fresh is None:
                fresh = self._id_factory().upper()
            mapping[old] = fresh
            return f"{match.group(1)}{fresh}{match.group(3)}"

        return _PROJECT_GUID_RE.sub(_swap, text), mapping

    def remap_file(self, manifest_path: Path, id_map: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Rewrite ``manifest_path`` in place; untouched when it carries no identifier."""
        text = manifest_path.read_text(encoding="utf-8-sig", errors="surrogateescape")
        updated, mapping = self.remap_text(text, id_map)
        if mapping:
            write_lines(manifest_path, updated.splitlines())
            logger.debug("Replaced module id in %s", manifest_path)
        return mapping


def regenerate_user_secrets(lines: List[str], id_factory: Optional[Callable[[], str]] = None) -> List[str]:
    """Replace every ``<UserSecretsId>`` line with a freshly generated identifier."""
    factory = id_factory or (lambda: str(uuid.uuid4()))
    result: List[str] = []
    for line in lines:
        if line.lstrip().startswith(_USER_SECRETS_PREFIX):
            indent = line[: len(line) - len(line.lstrip())]
            line = f"{indent}<UserSecretsId>{factory()}</UserSecretsId>"
        result.append(line)
    return result


__all__ = ["ModuleGuidRemapper", "regenerate_user_secrets"]

"""Provenance labels stored on the first non-blank line of a file."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional


class Label(str, Enum):
    """Recognized provenance tokens (exact, case-sensitive substring match)."""

    BASE_CODE = "BaseCode"
    CODE_COPY = "CodeCopy"
    GENERATED_CODE = "GeneratedCode"
    IGNORE = "Ignore"
    AI_CODE = "AiCode"

    def __str__(self) -> str:
        return self.value


# Files carrying one of these are never touched by the copier.
SKIP_LABELS = (Label.IGNORE, Label.GENERATED_CODE)


def read_first_line(path: Path) -> Optional[str]:
    """Return the first non-blank line of ``path`` or None for blank files."""
    with path.open("r", encoding="utf-8", errors="replace") as handle:
        for line in handle:
            if line.strip():
                return line.rstrip("\r\n")
    return None


def first_line_of(lines: Iterable[str]) -> Optional[str]:
    for line in lines:
        if line.strip():
            return line
    return None


def read_label(path: Path) -> Optional[Label]:
    """Return the label on the first non-blank line, if any."""
    line = read_first_line(path)
    if line is None:
        return None
    for label in Label:
        if label.value in line:
            return label
    return None


def has_label(path: Path, token: str) -> bool:
    """Return True when the first non-blank line of ``path`` contains ``token``."""
    line = read_first_line(path)
    return line is not None and str(token) in line


def is_tagged_skip(lines: Iterable[str]) -> bool:
    """Return True when the first non-blank line carries Ignore or GeneratedCode."""
    line = first_line_of(lines)
    return line is not None and any(label.value in line for label in SKIP_LABELS)


def relabel_lines(lines: List[str], old: str, new: str) -> List[str]:
    """Replace ``old`` with ``new`` on the first non-blank line only."""
    result = list(lines)
    for index, line in enumerate(result):
        if line.strip():
            result[index] = line.replace(str(old), str(new))
            break
    return result


def read_lines(path: Path) -> List[str]:
    """Read ``path`` as UTF-8 text split into lines without terminators.

    Undecodable bytes survive as surrogate escapes so :func:`write_lines` restores them.
    """
    return path.read_text(encoding="utf-8-sig", errors="surrogateescape").splitlines()


def render_bytes(lines: Iterable[str]) -> bytes:
    """Return the exact bytes :func:`write_lines` would write for ``lines``."""
    return render_lines(lines).encode("utf-8", errors="surrogateescape")


def render_lines(lines: Iterable[str]) -> str:
    """Join lines with normalized ``\\n`` endings and a trailing newline."""
    items = list(lines)
    if not items:
        return ""
    return "\n".join(items) + "\n"


def write_lines(path: Path, lines: Iterable[str]) -> None:
    """Write ``lines`` to ``path`` (UTF-8 without BOM), creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", errors="surrogateescape", newline="\n") as handle:
        handle.write(render_lines(lines))


def set_label(path: Path, old: str, new: str) -> None:
    """Rewrite the label token on ``path`` in place."""
    write_lines(path, relabel_lines(read_lines(path), old, new))


__all__ = [
    "Label",
    "SKIP_LABELS",
    "first_line_of",
    "has_label",
    "is_tagged_skip",
    "read_first_line",
    "read_label",
    "read_lines",
    "relabel_lines",
    "render_bytes",
    "render_lines",
    "set_label",
    "write_lines",
]

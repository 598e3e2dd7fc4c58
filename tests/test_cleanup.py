"""Tests for generated-file removal and directory cleaning."""

from __future__ import annotations

from pathlib import Path

from templatesync.cleanup import clean_directories, delete_generated_files
from templatesync.config import SyncConfig


def _touch(path: Path, content: str = "x\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_delete_generated_files_only_removes_labeled_matches(tmp_path: Path) -> None:
    generated = _touch(tmp_path / "Models" / "Item.cs", "// @GeneratedCode\nclass Item {}\n")
    razor = _touch(tmp_path / "Pages" / "Index.razor.cs", "//GeneratedCode\n")
    handwritten = _touch(tmp_path / "Models" / "Other.cs", "class Other {}\n")
    unmatched = _touch(tmp_path / "data.json", "// GeneratedCode\n")

    deleted = delete_generated_files(tmp_path, SyncConfig())

    assert set(deleted) == {generated, razor}
    assert not generated.exists()
    assert handwritten.exists()
    assert unmatched.exists()


def test_delete_generated_files_on_missing_root(tmp_path: Path) -> None:
    assert delete_generated_files(tmp_path / "missing") == []


def test_clean_directories_drops_build_folders_and_empty_dirs(tmp_path: Path) -> None:
    _touch(tmp_path / "App" / "bin" / "Debug" / "App.dll")
    _touch(tmp_path / "App" / "obj" / "cache.txt")
    _touch(tmp_path / "App" / "Program.cs")
    (tmp_path / "App" / "Empty" / "Nested").mkdir(parents=True)
    (tmp_path / "Stale").mkdir()

    removed = clean_directories(tmp_path, ["bin", "obj"])

    assert not (tmp_path / "App" / "bin").exists()
    assert not (tmp_path / "App" / "obj").exists()
    assert not (tmp_path / "App" / "Empty").exists()
    assert not (tmp_path / "Stale").exists()
    assert (tmp_path / "App" / "Program.cs").exists()
    assert tmp_path / "App" / "bin" in removed
    assert tmp_path.exists()


def test_clean_directories_removes_folder_emptied_by_drop(tmp_path: Path) -> None:
    _touch(tmp_path / "Lib" / "node_modules" / "pkg" / "index.js")

    clean_directories(tmp_path, ["node_modules"])

    assert not (tmp_path / "Lib").exists()

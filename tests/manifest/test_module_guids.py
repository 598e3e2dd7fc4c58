"""Tests for identifier rewriting inside module manifests."""

from __future__ import annotations

from pathlib import Path

from templatesync.manifest import ModuleGuidRemapper, regenerate_user_secrets

OLD = "0A0A0A0A-0000-4000-8000-000000000001"
NEW = "1B1B1B1B-0000-4000-8000-000000000002"


def test_remap_text_replaces_project_guid() -> None:
    text = f"<Project>\n  <PropertyGroup>\n    <ProjectGuid>{{{OLD.lower()}}}</ProjectGuid>\n  </PropertyGroup>\n</Project>\n"

    updated, mapping = ModuleGuidRemapper(id_factory=lambda: NEW).remap_text(text)

    assert mapping == {OLD: NEW}
    assert f"<ProjectGuid>{{{NEW}}}</ProjectGuid>" in updated


def test_remap_file_leaves_manifest_without_guid_untouched(tmp_path: Path) -> None:
    manifest = tmp_path / "Widgets.Logic.csproj"
    manifest.write_bytes(b"<Project Sdk=\"Microsoft.NET.Sdk\">\r\n</Project>\r\n")

    assert ModuleGuidRemapper().remap_file(manifest) == {}
    assert manifest.read_bytes() == b"<Project Sdk=\"Microsoft.NET.Sdk\">\r\n</Project>\r\n"


def test_remap_file_rewrites_in_place(tmp_path: Path) -> None:
    manifest = tmp_path / "Widgets.Web.esproj"
    manifest.write_text(f"<Project>\n<ProjectGuid>{OLD}</ProjectGuid>\n</Project>\n", encoding="utf-8")

    ModuleGuidRemapper(id_factory=lambda: NEW).remap_file(manifest)

    assert manifest.read_text(encoding="utf-8") == f"<Project>\n<ProjectGuid>{NEW}</ProjectGuid>\n</Project>\n"


def test_regenerate_user_secrets_keeps_indentation() -> None:
    lines = ["<PropertyGroup>", "\t<UserSecretsId>old</UserSecretsId>", "</PropertyGroup>"]

    result = regenerate_user_secrets(lines, id_factory=lambda: "fresh")

    assert result == ["<PropertyGroup>", "\t<UserSecretsId>fresh</UserSecretsId>", "</PropertyGroup>"]


def test_remap_text_reuses_known_ids() -> None:
    text = f"<ProjectGuid>{{{OLD.lower()}}}</ProjectGuid>\n<ProjectGuid>{{{OLD}}}</ProjectGuid>\n"

    updated, mapping = ModuleGuidRemapper(id_factory=lambda: "unused").remap_text(text, {OLD: NEW})

    assert mapping == {OLD: NEW}
    assert updated.count(NEW) == 2
    assert "unused" not in updated

"""Tests for label-based balancing."""

from __future__ import annotations

import os
from pathlib import Path

from templatesync.labels import read_lines
from templatesync.synchronizer import Synchronizer


def _pair(workspace_builder, files: dict[str, str], target_files: dict[str, str] | None = None):
    source = workspace_builder.create("Acme", ["Acme.Logic"], files)
    target = workspace_builder.create("Widgets", ["Widgets.Logic"], target_files)
    return source, target


def test_balance_copies_relabels_and_renames(workspace_builder) -> None:
    source, target = _pair(workspace_builder, {"Acme.Logic/Foo.txt": "//BaseCode\nHello Acme\n"})

    result = Synchronizer().balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.txt"])

    target_file = target / "Widgets.Logic" / "Foo.txt"
    assert read_lines(target_file) == ["//CodeCopy", "Hello Widgets"]
    assert result.written == [target_file]
    assert result.deleted == []


def test_second_balance_touches_nothing(workspace_builder) -> None:
    source, target = _pair(workspace_builder, {"Acme.Logic/Foo.txt": "//BaseCode\nHello Acme\n"})
    synchronizer = Synchronizer()
    synchronizer.balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.txt"])
    target_file = target / "Widgets.Logic" / "Foo.txt"
    os.utime(target_file, (1_000_000, 1_000_000))

    result = synchronizer.balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.txt"])

    assert not result.changed
    assert target_file.stat().st_mtime == 1_000_000


def test_balance_normalizes_line_endings(workspace_builder) -> None:
    source, target = _pair(workspace_builder, {})
    (source / "Acme.Logic" / "Crlf.cs").write_bytes(b"//@BaseCode\r\nclass Acme {}\r\n")

    Synchronizer().balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.cs"])

    assert (target / "Widgets.Logic" / "Crlf.cs").read_bytes() == b"//@CodeCopy\nclass Widgets {}\n"


def test_balance_never_overwrites_unlabeled_target(workspace_builder) -> None:
    source, target = _pair(
        workspace_builder,
        {"Acme.Logic/Foo.cs": "//@BaseCode\nclass Foo {}\n"},
        {"Widgets.Logic/Foo.cs": "// hand written\nclass Foo { int x; }\n"},
    )
    before = (target / "Widgets.Logic" / "Foo.cs").read_bytes()

    result = Synchronizer().balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.cs"])

    assert (target / "Widgets.Logic" / "Foo.cs").read_bytes() == before
    assert result.written == []


def test_balance_overwrites_stale_copy(workspace_builder) -> None:
    source, target = _pair(
        workspace_builder,
        {"Acme.Logic/Foo.cs": "//@BaseCode\nclass Foo { int y; }\n"},
        {"Widgets.Logic/Foo.cs": "//@CodeCopy\nclass Foo {}\n"},
    )

    result = Synchronizer().balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.cs"])

    assert read_lines(target / "Widgets.Logic" / "Foo.cs") == ["//@CodeCopy", "class Foo { int y; }"]
    assert result.deleted == []


def test_balance_deletes_copies_without_source(workspace_builder) -> None:
    source, target = _pair(
        workspace_builder,
        {"Acme.Logic/Kept.cs": "//@BaseCode\n"},
        {
            "Widgets.Logic/Orphan.cs": "//@CodeCopy\nclass Orphan {}\n",
            "Widgets.Logic/Mine.cs": "class Mine {}\n",
        },
    )

    result = Synchronizer().balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.cs"])

    assert not (target / "Widgets.Logic" / "Orphan.cs").exists()
    assert (target / "Widgets.Logic" / "Mine.cs").exists()
    assert (target / "Widgets.Logic" / "Kept.cs").exists()
    assert result.deleted == [target / "Widgets.Logic" / "Orphan.cs"]


def test_balance_workspace_files_and_multiple_targets(workspace_builder) -> None:
    source = workspace_builder.create("Acme", [], {"docs/setup.md": "<!-- BaseCode -->\nInstall Acme\n"})
    first = workspace_builder.create("Widgets", [])
    second = workspace_builder.create("Gadgets", [])

    Synchronizer().balance(source, ["BaseCode"], [first, second, source], ["CodeCopy"], ["*.md"])

    assert read_lines(first / "docs" / "setup.md") == ["<!-- CodeCopy -->", "Install Widgets"]
    assert read_lines(second / "docs" / "setup.md") == ["<!-- CodeCopy -->", "Install Gadgets"]
    assert read_lines(source / "docs" / "setup.md") == ["<!-- BaseCode -->", "Install Acme"]


def test_balance_into_workspace_sub_path(workspace_builder) -> None:
    source = workspace_builder.create("Acme", [], {"setup.md": "<!-- BaseCode -->\nAcme\n"})
    target = workspace_builder.create("Widgets", [])
    (target / "docs").mkdir()

    Synchronizer().balance(source, ["BaseCode"], [target / "docs"], ["CodeCopy"], ["*.md"])

    assert read_lines(target / "docs" / "setup.md") == ["<!-- CodeCopy -->", "Widgets"]


def test_balance_with_unequal_label_lists_is_a_no_op(workspace_builder) -> None:
    source, target = _pair(
        workspace_builder,
        {"Acme.Logic/Foo.cs": "//@BaseCode\n"},
        {"Widgets.Logic/Orphan.cs": "//@CodeCopy\n"},
    )

    result = Synchronizer().balance(source, ["BaseCode", "BaseCode"], [target], ["CodeCopy"], ["*.cs"])

    assert not result.changed
    assert (target / "Widgets.Logic" / "Orphan.cs").exists()
    assert not (target / "Widgets.Logic" / "Foo.cs").exists()


def test_balance_default_label_pairs_promote_base_code(workspace_builder) -> None:
    source = workspace_builder.create("Acme", ["Acme.Logic"], {"Acme.Logic/Foo.cs": "//@BaseCode\nAcme\n"})
    target = workspace_builder.create("Widgets", ["Widgets.Logic"])

    Synchronizer().balance(source, None, [target], None)

    assert read_lines(target / "Widgets.Logic" / "Foo.cs") == ["//@CodeCopy", "Widgets"]


def test_balance_missing_source_is_a_no_op(tmp_path: Path) -> None:
    result = Synchronizer().balance(tmp_path / "missing", ["BaseCode"], [tmp_path], ["CodeCopy"])

    assert not result.changed


def test_name_substitution_counts(workspace_builder) -> None:
    source, target = _pair(
        workspace_builder,
        {"Acme.Logic/Names.cs": "//@BaseCode\nnamespace Acme.Logic;\n// Acme and Acme again\n"},
    )

    Synchronizer().balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.cs"])

    text = (target / "Widgets.Logic" / "Names.cs").read_text(encoding="utf-8")
    assert text.count("Widgets") == 3
    assert "Acme" not in text


def test_base_code_targets_are_never_touched(workspace_builder) -> None:
    source, target = _pair(
        workspace_builder,
        {"Acme.Logic/Foo.cs": "//@BaseCode\nclass Foo { int y; }\n"},
        {
            "Widgets.Logic/Foo.cs": "//@BaseCode\nclass Foo {}\n",
            "Widgets.Logic/Extra.cs": "//@BaseCode\nclass Extra {}\n",
        },
    )

    result = Synchronizer().balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.cs"])

    assert read_lines(target / "Widgets.Logic" / "Foo.cs") == ["//@BaseCode", "class Foo {}"]
    assert (target / "Widgets.Logic" / "Extra.cs").exists()
    assert not result.changed


def test_deleted_source_removes_copy_and_restore_recreates_it(workspace_builder) -> None:
    source, target = _pair(workspace_builder, {"Acme.Logic/Foo.cs": "//@BaseCode\nclass Acme {}\n"})
    synchronizer = Synchronizer()
    source_file = source / "Acme.Logic" / "Foo.cs"
    target_file = target / "Widgets.Logic" / "Foo.cs"
    original = source_file.read_bytes()

    synchronizer.balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.cs"])
    expected = target_file.read_bytes()
    source_file.unlink()
    removed = synchronizer.balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.cs"])

    assert removed.deleted == [target_file]
    assert not target_file.exists()

    source_file.write_bytes(original)
    restored = synchronizer.balance_path(source, ["BaseCode"], target, ["CodeCopy"], ["*.cs"])

    assert restored.written == [target_file]
    assert target_file.read_bytes() == expected


def test_balance_carries_non_utf8_bytes(workspace_builder) -> None:
    source, target = _pair(workspace_builder, {})
    (source / "Acme.Logic" / "Umlaut.cs").write_bytes("//@BaseCode\n// Größe Acme\n".encode("latin-1"))

    result = Synchronizer().balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.cs"])

    target_file = target / "Widgets.Logic" / "Umlaut.cs"
    assert result.failed == []
    assert target_file.read_bytes() == "//@CodeCopy\n// Größe Widgets\n".encode("latin-1")
    assert not Synchronizer().balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.cs"]).changed


def test_balance_records_unwritable_target_and_continues(workspace_builder) -> None:
    source, target = _pair(
        workspace_builder,
        {"Acme.Logic/Bad.cs": "//@BaseCode\nclass Bad {}\n", "Acme.Logic/Good.cs": "//@BaseCode\nclass Good {}\n"},
    )
    (target / "Widgets.Logic" / "Bad.cs").mkdir()

    result = Synchronizer().balance(source, ["BaseCode"], [target], ["CodeCopy"], ["*.cs"])

    assert result.failed == [source / "Acme.Logic" / "Bad.cs"]
    assert result.written == [target / "Widgets.Logic" / "Good.cs"]
    assert read_lines(target / "Widgets.Logic" / "Good.cs") == ["//@CodeCopy", "class Good {}"]


def test_balance_into_front_end_module_sub_directory(workspace_builder) -> None:
    source = workspace_builder.create(
        "Acme",
        [],
        {
            "Acme.AngularApp/Acme.AngularApp.esproj": "<Project />\n",
            "Acme.AngularApp/src/app/x.ts": "//@BaseCode\nexport const name = 'Acme';\n",
            "Acme.AngularApp/karma.conf.ts": "//@BaseCode\n",
        },
    )
    target = workspace_builder.create(
        "Widgets",
        [],
        {
            "Widgets.AngularApp/Widgets.AngularApp.esproj": "<Project />\n",
            "Widgets.AngularApp/src/main.ts": "bootstrap();\n",
        },
    )
    app = target / "Widgets.AngularApp"

    result = Synchronizer().balance(source, ["BaseCode"], [app / "src"], ["CodeCopy"], ["*.ts"])

    assert result.written == [app / "src" / "app" / "x.ts"]
    assert read_lines(app / "src" / "app" / "x.ts") == ["//@CodeCopy", "export const name = 'Widgets';"]
    assert not (app / "karma.conf.ts").exists()
    assert not (app / "src" / "src").exists()

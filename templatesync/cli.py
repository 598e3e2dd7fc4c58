"""CLI entrypoints for templatesync commands."""

from __future__ import annotations

import argparse
import contextlib
import sys
from pathlib import Path
from typing import Iterator, List

from .cleanup import clean_directories, delete_generated_files
from .config import ConfigError, SyncConfig, load_config
from .copier import Copier
from .logging import configure_logging
from .progress import ProgressIndicator
from .scanner import discover_workspaces
from .synchronizer import Synchronizer


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_progress_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a busy indicator while the pass runs.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="templatesync",
        description="Clone template workspaces and keep derived workspaces in sync.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .templatesync.yml file or its directory (defaults to the source workspace).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    copy_parser = subparsers.add_parser(
        "copy",
        help="Clone a workspace into a new, renamed workspace.",
    )
    _add_verbose_option(copy_parser, suppress_default=True)
    _add_progress_option(copy_parser)
    copy_parser.add_argument("source", help="Root of the template workspace.")
    copy_parser.add_argument("target", help="Root of the new workspace; its folder name becomes the workspace name.")
    copy_parser.add_argument(
        "-m",
        "--module",
        dest="modules",
        action="append",
        default=None,
        help="Module to include (repeatable). Defaults to every module in the manifest.",
    )
    copy_parser.add_argument(
        "--force",
        action="store_true",
        help="Copy even when the target directory already exists.",
    )

    balance_parser = subparsers.add_parser(
        "balance",
        help="Synchronize labeled files from a source workspace into target paths.",
    )
    _add_verbose_option(balance_parser, suppress_default=True)
    _add_progress_option(balance_parser)
    balance_parser.add_argument("source", help="Source workspace or directory.")
    balance_parser.add_argument("targets", nargs="*", help="Target workspaces, modules or sub-paths.")
    balance_parser.add_argument(
        "--repos",
        default=None,
        help="Also balance every workspace discovered below this directory.",
    )
    balance_parser.add_argument(
        "--source-label",
        dest="source_labels",
        action="append",
        default=None,
        help="Source label (repeatable, paired in order with --target-label).",
    )
    balance_parser.add_argument(
        "--target-label",
        dest="target_labels",
        action="append",
        default=None,
        help="Target label (repeatable).",
    )
    balance_parser.add_argument(
        "--pattern",
        dest="patterns",
        action="append",
        default=None,
        help="File name pattern such as '*.cs' (repeatable).",
    )

    cleanup_parser = subparsers.add_parser(
        "cleanup",
        help="Delete GeneratedCode files below a path.",
    )
    _add_verbose_option(cleanup_parser, suppress_default=True)
    cleanup_parser.add_argument("path", nargs="?", default=".", help="Directory to clean.")

    clean_parser = subparsers.add_parser(
        "clean",
        help="Remove build folders and empty directories below a path.",
    )
    _add_verbose_option(clean_parser, suppress_default=True)
    clean_parser.add_argument("path", nargs="?", default=".", help="Directory to clean.")
    clean_parser.add_argument(
        "--drop",
        dest="drop_folders",
        action="append",
        default=None,
        help="Folder name to remove (repeatable). Defaults to the configured drop folders.",
    )

    workspaces_parser = subparsers.add_parser(
        "workspaces",
        help="List workspaces found below a directory.",
    )
    _add_verbose_option(workspaces_parser, suppress_default=True)
    workspaces_parser.add_argument("path", nargs="?", default=".", help="Directory to search.")
    workspaces_parser.add_argument("--depth", type=int, default=3, help="Maximum search depth.")

    return parser


@contextlib.contextmanager
def _progress(enabled: bool) -> Iterator[None]:
    if not enabled:
        yield
        return
    with ProgressIndicator():
        yield


def _load(args: argparse.Namespace, default_root: str) -> SyncConfig:
    return load_config(Path(args.config if args.config else default_root))


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for templatesync commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        if args.command == "copy":
            config = _load(args, args.source)
            target = Path(args.target).expanduser()
            if target.exists() and not args.force:
                parser.exit(1, f"Target path already exists: {target} (use --force)\n")
            with _progress(args.progress):
                result = Copier(config).copy(args.source, target, args.modules)
            print(f"Copied {len(result.copied)} files to {_relativize(target.resolve())}")
            if result.failed:
                parser.exit(1, f"{len(result.failed)} files could not be copied; re-run to retry.\n")
        elif args.command == "balance":
            config = _load(args, args.source)
            targets: List[str] = list(args.targets)
            if args.repos:
                source = Path(args.source).expanduser().resolve()
                for path in discover_workspaces(Path(args.repos).expanduser().resolve(), config):
                    if path != source and str(path) not in targets:
                        targets.append(str(path))
            if not targets:
                parser.exit(1, "No target paths given.\n")
            with _progress(args.progress):
                result = Synchronizer(config).balance(
                    args.source,
                    args.source_labels,
                    targets,
                    args.target_labels,
                    args.patterns,
                )
            print(f"Balanced {len(targets)} target(s): {len(result.written)} written, {len(result.deleted)} deleted")
        elif args.command == "cleanup":
            config = _load(args, args.path)
            deleted = delete_generated_files(Path(args.path).expanduser().resolve(), config)
            print(f"Deleted {len(deleted)} generated files")
        elif args.command == "clean":
            config = _load(args, args.path)
            drop_folders = args.drop_folders or config.drop_folders
            removed = clean_directories(Path(args.path).expanduser().resolve(), drop_folders)
            print(f"Removed {len(removed)} directories")
        elif args.command == "workspaces":
            config = _load(args, args.path)
            for path in discover_workspaces(Path(args.path).expanduser().resolve(), config, max_depth=args.depth):
                print(_relativize(path))
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")
    except FileNotFoundError as exc:
        parser.exit(1, f"{exc}\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])

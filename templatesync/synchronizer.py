"""Label-based balancing of a template workspace into derived targets."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .config import SyncConfig
from .labels import has_label, read_lines, relabel_lines, render_bytes, write_lines
from .logging import get_logger
from .models import BalanceResult, CorrespondenceMapping
from .paths import PathClassifier
from .scanner import find_labeled_files


class Synchronizer:
    """Deletes stale derived files and re-copies labeled source files into targets.

    For each label pair ``(source_labels[i], target_labels[i])``, applied fully and in
    order, the balance pass

    1. removes every target file labeled ``target_labels[i]`` that no longer has a
       labeled source counterpart,
    2. copies every source file labeled ``source_labels[i]`` to its counterpart in each
       target, substituting the workspace name on every line and swapping the label on
       the first non-blank line.

    A target file is only overwritten when it does not exist or already carries
    ``target_labels[i]``. Unchanged content is not rewritten, so repeated calls converge
    without touching the filesystem.
    """

    def __init__(self, config: SyncConfig | None = None) -> None:
        self.config = config or SyncConfig()
        self.classifier = PathClassifier(self.config)
        self.logger = get_logger("synchronizer")

    def balance_path(
        self,
        source_path: str | Path,
        source_labels: Optional[Sequence[str]],
        target_path: str | Path,
        target_labels: Optional[Sequence[str]],
        patterns: Optional[Sequence[str]] = None,
    ) -> BalanceResult:
        """Balance a single target; see :meth:`balance`."""
        return self.balance(source_path, source_labels, [target_path], target_labels, patterns)

    def balance(
        self,
        source_path: str | Path,
        source_labels: Optional[Sequence[str]],
        target_paths: Iterable[str | Path],
        target_labels: Optional[Sequence[str]],
        patterns: Optional[Sequence[str]] = None,
    ) -> BalanceResult:
        result = BalanceResult()
        defaults = self.config.balance
        source_labels = list(source_labels) if source_labels is not None else list(defaults.source_labels)
        target_labels = list(target_labels) if target_labels is not None else list(defaults.target_labels)
        patterns = list(patterns) if patterns is not None else list(defaults.patterns)

        source = Path(source_path).expanduser().resolve()
        if not source.is_dir():
            self.logger.warning("Source path %s does not exist; nothing balanced", source)
            return result
        if len(source_labels) != len(target_labels):
            self.logger.warning(
                "Label lists differ in length (%d source, %d target); nothing balanced",
                len(source_labels),
                len(target_labels),
            )
            return result

        targets: List[Path] = []
        for raw in target_paths:
            target = Path(raw).expanduser().resolve()
            if target == source:
                self.logger.warning("Skipping target %s: same as source", target)
            elif target.is_dir():
                targets.append(target)
            else:
                self.logger.debug("Skipping missing target %s", target)

        for source_label, target_label in zip(source_labels, target_labels):
            self._balance_labels(source, str(source_label), targets, str(target_label), patterns, result)

        self.logger.info(
            "Balanced %s into %d target(s): %d written, %d deleted",
            source,
            len(targets),
            len(result.written),
            len(result.deleted),
        )
        return result

    def _balance_labels(
        self,
        source: Path,
        source_label: str,
        targets: Sequence[Path],
        target_label: str,
        patterns: Sequence[str],
        result: BalanceResult,
    ) -> None:
        source_files: List[Path] = []
        for pattern in patterns:
            for path in find_labeled_files(source, pattern, source_label, self.config):
                if path not in source_files:
                    source_files.append(path)

        mappings: List[CorrespondenceMapping] = []
        for target in targets:
            for source_file in source_files:
                mapping = self.classifier.resolve(source_file, target)
                if mapping is None:
                    self.logger.debug("No counterpart for %s in %s", source_file, target)
                    continue
                mappings.append(mapping)
        expected = {mapping.target for mapping in mappings}

        for target in targets:
            for pattern in patterns:
                for path in find_labeled_files(target, pattern, target_label, self.config):
                    if path in expected or path in result.deleted:
                        continue
                    try:
                        path.unlink()
                    except OSError as exc:
                        self.logger.warning("Cannot delete %s: %s", path, exc)
                        result.failed.append(path)
                        continue
                    self.logger.debug("Deleted %s", path)
                    result.deleted.append(path)

        for mapping in mappings:
            self._synchronize_file(mapping, source_label, target_label, result)

    def _synchronize_file(
        self,
        mapping: CorrespondenceMapping,
        source_label: str,
        target_label: str,
        result: BalanceResult,
    ) -> None:
        target_file = mapping.target
        try:
            if target_file.exists() and not has_label(target_file, target_label):
                self.logger.debug("Keeping %s: not labeled %s", target_file, target_label)
                return

            source_name = mapping.source_workspace.name
            target_name = mapping.target_workspace.name
            lines = [line.replace(source_name, target_name) for line in read_lines(mapping.source)]
            lines = relabel_lines(lines, source_label, target_label)

            if target_file.exists() and target_file.read_bytes() == render_bytes(lines):
                return
            write_lines(target_file, lines)
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.warning("Cannot synchronize %s -> %s: %s", mapping.source, target_file, exc)
            result.failed.append(mapping.source)
            return
        self.logger.debug("Wrote %s", target_file)
        result.written.append(target_file)


__all__ = ["Synchronizer"]

"""Enumerate the per-type documentation files to repair."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import DocDedupeConfig
from .logging import get_logger

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".idea",
    ".vs",
}

_DOCUMENT_SUFFIX = ".xml"


@dataclass
class ExcludeRule:
    """An ``exclude_paths`` pattern from .docdedupe.yml."""

    pattern: str
    directory_only: bool
    anchored: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored or "/" in self.pattern:
            return fnmatchcase(rel_path, self.pattern)
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _build_rule(pattern: str) -> ExcludeRule | None:
    pattern = pattern.strip().replace("\\", "/")
    if not pattern:
        return None
    directory_only = pattern.endswith("/")
    pattern = pattern.rstrip("/")
    anchored = pattern.startswith("/")
    pattern = pattern.lstrip("/")
    if not pattern:
        return None
    return ExcludeRule(pattern=pattern, directory_only=directory_only, anchored=anchored)


class FileDiscovery:
    """Walks the corpus root for documentation files, skipping the index."""

    def __init__(self) -> None:
        self.logger = get_logger("discovery")

    def discover(self, config: DocDedupeConfig) -> List[Path]:
        root = config.root
        if not root.exists():
            raise FileNotFoundError(f"Documentation path not found: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Documentation path is not a directory: {root}")

        rules = [rule for rule in map(_build_rule, config.exclude_paths) if rule is not None]
        index_rel = Path(config.index_dir).as_posix().lower()
        files = sorted(self._iter_files(root, index_rel, rules))
        self.logger.info("Detected %d files", len(files))
        return files

    def _iter_files(self, root: Path, index_rel: str, rules: Sequence[ExcludeRule]) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept = []
            for name in dirnames:
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if rel_path.lower() == index_rel:
                    continue
                if _is_excluded(rel_path, True, rules):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for filename in filenames:
                if not filename.lower().endswith(_DOCUMENT_SUFFIX):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _is_excluded(rel_path, False, rules):
                    continue
                yield current_dir / filename


def _is_excluded(rel_path: str, is_dir: bool, rules: Sequence[ExcludeRule]) -> bool:
    return any(rule.matches(rel_path, is_dir) for rule in rules)


__all__ = ["ExcludeRule", "FileDiscovery"]

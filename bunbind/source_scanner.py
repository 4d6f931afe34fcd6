"""Discovery of Rust source modules beneath the library's source directory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .models import SourceModule

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "target",
    "node_modules",
    "__pycache__",
}


@dataclass
class IgnoreRule:
    """An exclude glob from .bunbind.yml, matched against library-relative paths."""

    pattern: str
    directory_only: bool
    anchored: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        has_slash="/" in pattern,
    )


class SourceScanner:
    """Walks ``<root>/<source_dir>`` and returns modules in a stable order."""

    def __init__(
        self,
        suffixes: Sequence[str] = (".rs",),
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self.suffixes = tuple(suffix.lower() for suffix in suffixes)
        self.rules = [rule for rule in map(build_ignore_rule, exclude_paths) if rule is not None]

    def scan(self, root: Path, source_dir: str = "rs") -> List[SourceModule]:
        """Return every source module under ``root/source_dir``, sorted by path.

        A missing source directory yields no modules; a missing library root
        is an error.
        """
        root = root.expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Library path not found: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Library path is not a directory: {root}")

        source_root = root / source_dir
        if not source_root.is_dir():
            return []

        modules = [
            SourceModule(path=path, root=source_root)
            for path in self._iter_files(root, source_root)
        ]
        return sorted(modules, key=lambda module: module.path.as_posix())

    def _iter_files(self, root: Path, source_root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(source_root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix()

            dirnames[:] = [
                name
                for name in dirnames
                if name not in _EXCLUDED_DIRS
                and not self._ignored(f"{rel_dir}/{name}", is_dir=True)
            ]

            for filename in filenames:
                if not filename.lower().endswith(self.suffixes):
                    continue
                if self._ignored(f"{rel_dir}/{filename}", is_dir=False):
                    continue
                yield current_dir / filename

    def _ignored(self, rel_path: str, *, is_dir: bool) -> bool:
        return any(rule.matches(rel_path, is_dir) for rule in self.rules)


__all__ = ["IgnoreRule", "SourceScanner", "build_ignore_rule"]

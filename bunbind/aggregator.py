"""Append-only maintenance of the shared ``index.ts`` entry point."""

from __future__ import annotations

import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from .logging import get_logger

EXPORT_FMT = 'export * from "{path}";'

BENCHMARK_HELPER = (
    "export function Benchmark<T>(label: string, fn: () => T): T {\n"
    "    console.time(label);\n"
    "    const result = fn();\n"
    "    console.timeEnd(label);\n"
    "    return result;\n"
    "}"
)
_BENCHMARK_DECLARATION = re.compile(r"\b(?:function|const|let|var|class)\s+Benchmark\b")


@dataclass
class IndexUpdate:
    """Result of merging import paths into the index file."""

    path: Path
    content: str
    changed: bool
    added: List[str]


class IndexAggregator:
    """Merges re-export lines into a possibly hand-edited index file.

    Existing text is treated as an append-only log: lines are never parsed,
    rewritten or reordered. A generated line is added only when an identical
    line is not already present, so path spellings that differ textually
    (``./mod/a`` vs ``./mod//a``) are kept as separate lines.
    """

    def __init__(self) -> None:
        self.logger = get_logger("aggregator")

    @staticmethod
    def export_line(import_path: str) -> str:
        return EXPORT_FMT.format(path=import_path)

    def new_lines(self, prior: str, import_paths: Iterable[str]) -> List[str]:
        """Return the lines ``merge`` would append, in discovery order."""
        existing = set(prior.splitlines())
        added: List[str] = []
        for import_path in import_paths:
            line = self.export_line(import_path)
            if line in existing:
                continue
            existing.add(line)
            added.append(line)

        if not any(_BENCHMARK_DECLARATION.search(line) for line in existing):
            if added:
                added.append("")
            added.extend(BENCHMARK_HELPER.splitlines())
        return added

    def merge(self, prior: str, import_paths: Iterable[str]) -> str:
        added = self.new_lines(prior, import_paths)
        if not added:
            return prior
        # new lines follow the prior file's line ending
        eol = "\r\n" if "\r\n" in prior else "\n"
        block = eol.join(added) + eol
        if not prior:
            return block
        if not prior.endswith("\n"):
            prior += eol
        return f"{prior}{eol}{block}"

    def update(
        self, index_path: Path, import_paths: Iterable[str], *, dry_run: bool = False
    ) -> IndexUpdate:
        """Merge ``import_paths`` into ``index_path`` with one atomic write.

        The merged text is computed in full before anything touches disk and
        is swapped in with :func:`os.replace`, so an interrupted or failing
        write leaves the previous index intact.
        """
        try:
            with index_path.open(encoding="utf-8", newline="") as handle:
                prior = handle.read()
        except FileNotFoundError:
            prior = ""

        paths = list(import_paths)
        added = self.new_lines(prior, paths)
        content = self.merge(prior, paths)
        changed = content != prior
        if changed and not dry_run:
            _atomic_write(index_path, content)
            self.logger.info("Updated %s (%d new lines)", index_path, len(added))
        elif not changed:
            self.logger.debug("%s already up to date", index_path)
        return IndexUpdate(path=index_path, content=content, changed=changed, added=added)


def _atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        # mkstemp creates 0600; keep the index readable like the file it replaces
        if path.exists():
            shutil.copymode(path, tmp_name)
        else:
            os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


__all__ = ["BENCHMARK_HELPER", "EXPORT_FMT", "IndexAggregator", "IndexUpdate"]

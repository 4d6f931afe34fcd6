"""Pipeline orchestration: discover, extract, emit, then merge the index once."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .aggregator import IndexAggregator
from .config import BunbindConfig, load_config
from .emitter import BindingEmitter
from .extractors import Extractor, SignatureParseError, discover_extractors, get_extractor
from .logging import get_logger, log_diagnostic
from .models import (
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    Diagnostic,
    GenerationReport,
    IndexEntry,
    SourceModule,
)
from .platforms import UnsupportedPlatformError
from .source_scanner import SourceScanner
from .type_map import DEFAULT_TYPE_TABLE


@dataclass
class ModuleOutcome:
    """Result of processing one source module."""

    module: SourceModule
    entry: Optional[IndexEntry] = None
    written: Optional[Path] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    fatal: Optional[UnsupportedPlatformError] = None


class Orchestrator:
    """Coordinates one generation run over a library directory.

    Per-module work touches only that module's binding path, so it may run on
    a thread pool. The shared index is merged exactly once, on the calling
    thread, after every module has been handled.
    """

    def __init__(
        self,
        scanner: SourceScanner | None = None,
        extractors: Optional[Sequence[Extractor]] = None,
        emitter: BindingEmitter | None = None,
        aggregator: IndexAggregator | None = None,
    ) -> None:
        self._scanner_override = scanner
        self.extractors = list(extractors) if extractors is not None else discover_extractors()
        self._emitter_override = emitter
        self.aggregator = aggregator or IndexAggregator()
        self.logger = get_logger("orchestrator")

    def run(
        self,
        path: str | Path,
        *,
        platform: str | None = None,
        workers: int | None = None,
        dry_run: bool = False,
    ) -> GenerationReport:
        """Generate bindings for every module beneath ``path`` and update the index."""
        root = Path(path).expanduser().resolve()
        config = load_config(root)
        self.logger.info("Starting generation run for %s", root)

        scanner = self._scanner_override or SourceScanner(
            suffixes=[suffix for extractor in self.extractors for suffix in extractor.suffixes],
            exclude_paths=config.exclude_paths,
        )
        modules = scanner.scan(root, config.source_dir)
        self.logger.debug("Discovered %d source modules", len(modules))

        emitter = self._emitter_override or self._build_emitter(config, platform)
        report = GenerationReport(root=root, index_path=config.index_path, dry_run=dry_run)

        worker_count = workers if workers is not None else config.workers
        for outcome in self._process_all(modules, config, emitter, worker_count, dry_run):
            for diagnostic in outcome.diagnostics:
                log_diagnostic(self.logger, diagnostic)
            report.diagnostics.extend(outcome.diagnostics)
            if outcome.fatal is not None:
                self.logger.error("Aborting run: %s", outcome.fatal)
                report.diagnostics.append(
                    Diagnostic(SEVERITY_ERROR, _display(outcome.module, root), str(outcome.fatal))
                )
                report.aborted = True
                return report
            if outcome.written is not None:
                report.written.append(outcome.written)
            if outcome.entry is not None:
                report.entries.append(outcome.entry)

        self._merge_index(report, config, dry_run)
        self.logger.info(
            "Generation %s: %d bindings, %d warnings, %d errors",
            report.status,
            len(report.entries),
            len(report.warnings),
            len(report.errors),
        )
        return report

    def _build_emitter(self, config: BunbindConfig, platform: str | None) -> BindingEmitter:
        type_table = DEFAULT_TYPE_TABLE
        if config.type_aliases:
            type_table = type_table.with_aliases(config.type_aliases)
        return BindingEmitter(
            platform=platform or config.platform,
            type_table=type_table,
            bin_dir=config.bin_dir,
            templates_dir=config.templates_dir,
        )

    def _process_all(
        self,
        modules: Sequence[SourceModule],
        config: BunbindConfig,
        emitter: BindingEmitter,
        workers: int,
        dry_run: bool,
    ) -> Iterator[ModuleOutcome]:
        if workers <= 1 or len(modules) <= 1:
            for module in modules:
                outcome = self._process_module(module, config, emitter, dry_run)
                yield outcome
                if outcome.fatal is not None:
                    return
            return

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._process_module, module, config, emitter, dry_run)
                for module in modules
            ]
            try:
                # consumed in submission order so index lines follow discovery order
                for future in futures:
                    outcome = future.result()
                    yield outcome
                    if outcome.fatal is not None:
                        return
            finally:
                for future in futures:
                    future.cancel()

    def _process_module(
        self,
        module: SourceModule,
        config: BunbindConfig,
        emitter: BindingEmitter,
        dry_run: bool,
    ) -> ModuleOutcome:
        outcome = ModuleOutcome(module=module)
        display = _display(module, config.root)
        target = module.binding_path(config.output_root)

        extractor = get_extractor(module.path, self.extractors)
        if extractor is None:  # pragma: no cover - scanner only yields supported suffixes
            outcome.diagnostics.append(
                Diagnostic(SEVERITY_WARNING, display, "no extractor supports this file type")
            )
            return outcome

        if not dry_run:
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                outcome.diagnostics.append(
                    Diagnostic(SEVERITY_ERROR, display, f"cannot create {target.parent}: {exc}")
                )
                return outcome

        try:
            source = module.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            outcome.diagnostics.append(Diagnostic(SEVERITY_ERROR, display, f"cannot read source: {exc}"))
            return outcome

        try:
            functions = extractor.extract(source)
        except SignatureParseError as exc:
            outcome.diagnostics.append(Diagnostic(SEVERITY_ERROR, display, f"parse failure: {exc}"))
            return outcome

        if not functions:
            outcome.diagnostics.append(
                Diagnostic(SEVERITY_WARNING, display, "no exported functions found")
            )
            return outcome

        try:
            content = emitter.emit(module.base_name, functions)
        except UnsupportedPlatformError as exc:
            outcome.fatal = exc
            return outcome

        if not dry_run:
            try:
                target.write_text(content, encoding="utf-8")
            except OSError as exc:
                outcome.diagnostics.append(
                    Diagnostic(SEVERITY_ERROR, display, f"cannot write {target}: {exc}")
                )
                return outcome
            self.logger.debug("Wrote %s (%d functions)", target, len(functions))

        outcome.written = target
        outcome.entry = IndexEntry(
            import_path=module.import_path(config.output_dir),
            names=tuple(function.name for function in functions),
        )
        return outcome

    def _merge_index(self, report: GenerationReport, config: BunbindConfig, dry_run: bool) -> None:
        import_paths = [entry.import_path for entry in report.entries]
        try:
            update = self.aggregator.update(config.index_path, import_paths, dry_run=dry_run)
        except OSError as exc:
            diagnostic = Diagnostic(SEVERITY_ERROR, str(config.index_path), f"cannot update index: {exc}")
            log_diagnostic(self.logger, diagnostic)
            report.diagnostics.append(diagnostic)
            report.aborted = True
            return
        report.index_changed = update.changed


def _display(module: SourceModule, root: Path) -> str:
    try:
        return module.path.relative_to(root).as_posix()
    except ValueError:
        return str(module.path)


__all__ = ["ModuleOutcome", "Orchestrator"]

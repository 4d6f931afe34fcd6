"""Core data models shared across bunbind components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, List, Tuple

SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"

STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial"
STATUS_FAILED = "failed"


@dataclass(frozen=True)
class SourceModule:
    """A discovered Rust source file relative to the source root."""

    path: Path
    root: Path

    @property
    def base_name(self) -> str:
        return self.path.stem

    @property
    def relative_dir(self) -> PurePosixPath:
        relative = self.path.relative_to(self.root).parent
        return PurePosixPath(relative.as_posix())

    def binding_path(self, output_root: Path) -> Path:
        """Return where the generated binding for this module is written."""
        return output_root.joinpath(*self.relative_dir.parts) / f"{self.base_name}.ts"

    def import_path(self, output_dir: str) -> str:
        """Return the index import specifier, always using forward slashes."""
        module_path = PurePosixPath(output_dir.replace("\\", "/")) / self.relative_dir / self.base_name
        return f"./{module_path.as_posix()}"


@dataclass(frozen=True)
class Parameter:
    """One positional argument of an exported function."""

    type: str
    name: str = ""


@dataclass(frozen=True)
class ExportedFunction:
    """Signature of a function exported over the C ABI."""

    name: str
    params: Tuple[Parameter, ...] = ()
    return_type: str = "void"
    line: int = 0

    @property
    def arg_types(self) -> List[str]:
        return [param.type for param in self.params]


@dataclass(frozen=True)
class IndexEntry:
    """Import path of a generated binding and the names it exports."""

    import_path: str
    names: Tuple[str, ...]


@dataclass(frozen=True)
class Diagnostic:
    """A warning or error raised while processing a single module."""

    severity: str
    path: str
    message: str


@dataclass
class GenerationReport:
    """Outcome of a generation run."""

    root: Path
    entries: List[IndexEntry] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)
    index_path: Path | None = None
    index_changed: bool = False
    aborted: bool = False
    dry_run: bool = False

    @property
    def exports(self) -> Dict[str, List[str]]:
        return {entry.import_path: list(entry.names) for entry in self.entries}

    @property
    def warnings(self) -> List[Diagnostic]:
        return [item for item in self.diagnostics if item.severity == SEVERITY_WARNING]

    @property
    def errors(self) -> List[Diagnostic]:
        return [item for item in self.diagnostics if item.severity == SEVERITY_ERROR]

    @property
    def status(self) -> str:
        if self.aborted:
            return STATUS_FAILED
        if self.errors:
            return STATUS_PARTIAL
        return STATUS_SUCCESS

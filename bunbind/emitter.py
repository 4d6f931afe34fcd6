"""Renders bun:ffi binding modules from extracted signatures."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .models import ExportedFunction
from .platforms import TargetPlatform
from .type_map import DEFAULT_TYPE_TABLE, TypeTable

DEFAULT_BIN_DIR = "lib/bin"
BINDING_TEMPLATE = "binding.ts.j2"


@dataclass(frozen=True)
class SymbolBinding:
    """One dlopen symbol entry with its FFI tags already resolved."""

    name: str
    args: Tuple[str, ...]
    returns: str


@dataclass(frozen=True)
class BindingModule:
    """Everything the binding template needs, in output order."""

    module_name: str
    library_stem: str
    bin_dir: str
    symbols: Tuple[SymbolBinding, ...]

    @property
    def export_names(self) -> List[str]:
        return [symbol.name for symbol in self.symbols]


class BindingEmitter:
    """Turns a module's exported functions into TypeScript source text.

    The emitter never touches the filesystem apart from loading its template,
    so the same inputs always render byte-identical output.
    """

    def __init__(
        self,
        *,
        platform: str | None = None,
        type_table: TypeTable = DEFAULT_TYPE_TABLE,
        bin_dir: str = DEFAULT_BIN_DIR,
        templates_dir: Path | None = None,
    ) -> None:
        self.platform = platform
        self.type_table = type_table
        self.bin_dir = bin_dir.replace("\\", "/").rstrip("/")
        self._env = self._create_env(templates_dir)

    def build(self, module_name: str, functions: Sequence[ExportedFunction]) -> BindingModule:
        """Resolve platform naming and FFI tags for ``functions``.

        Raises :class:`~bunbind.platforms.UnsupportedPlatformError` when the
        target platform has no known library naming convention.
        """
        target = TargetPlatform.resolve(self.platform)
        symbols = tuple(
            SymbolBinding(
                name=function.name,
                args=tuple(self.type_table.resolve(arg) for arg in function.arg_types),
                returns=self.type_table.resolve(function.return_type),
            )
            for function in functions
        )
        return BindingModule(
            module_name=module_name,
            library_stem=target.library_stem(module_name),
            bin_dir=self.bin_dir,
            symbols=symbols,
        )

    def render(self, module: BindingModule) -> str:
        template = self._env.get_template(BINDING_TEMPLATE)
        return template.render(module=module)

    def emit(self, module_name: str, functions: Sequence[ExportedFunction]) -> str:
        return self.render(self.build(module_name, functions))

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        env = Environment(
            loader=FileSystemLoader(_unique(directories)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        env.filters["ffi_type"] = _ffi_type
        return env


def _ffi_type(tag: str) -> str:
    return f"FFIType.{tag}"


def _unique(items: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    ordered: List[str] = []
    for item in items:
        if item not in seen:
            ordered.append(item)
            seen.add(item)
    return ordered


__all__ = ["BindingEmitter", "BindingModule", "SymbolBinding", "DEFAULT_BIN_DIR"]

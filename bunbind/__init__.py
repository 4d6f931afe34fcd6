"""bunbind - bun:ffi binding generator for exported Rust functions."""

from .aggregator import IndexAggregator
from .emitter import BindingEmitter
from .extractors import RustExtractor, SignatureParseError
from .models import ExportedFunction, GenerationReport, Parameter, SourceModule
from .orchestrator import Orchestrator
from .platforms import TargetPlatform, UnsupportedPlatformError
from .type_map import DEFAULT_TYPE_TABLE, TypeTable

__all__ = [
    "BindingEmitter",
    "DEFAULT_TYPE_TABLE",
    "ExportedFunction",
    "GenerationReport",
    "IndexAggregator",
    "Orchestrator",
    "Parameter",
    "RustExtractor",
    "SignatureParseError",
    "SourceModule",
    "TargetPlatform",
    "TypeTable",
    "UnsupportedPlatformError",
]

"""Signature extractors keyed by source file suffix."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .base import Extractor
from .rust import RustExtractor
from .tokens import SignatureParseError

_BUILTIN_FACTORIES: Dict[str, Callable[[], Extractor]] = {
    "rust": RustExtractor,
}


def discover_extractors(enabled: Sequence[str] | None = None) -> List[Extractor]:
    """Return instantiated extractors, honoring optional enabled names."""
    if enabled is None:
        return [factory() for factory in _BUILTIN_FACTORIES.values()]

    wanted = [name.lower() for name in enabled]
    missing = sorted(name for name in wanted if name not in _BUILTIN_FACTORIES)
    if missing:
        raise ValueError(f"Unknown extractors requested: {', '.join(missing)}")
    return [_BUILTIN_FACTORIES[name]() for name in dict.fromkeys(wanted)]


def get_extractor(path: Path, extractors: Sequence[Extractor] | None = None) -> Optional[Extractor]:
    """Return the first extractor that supports ``path``."""
    for extractor in extractors if extractors is not None else discover_extractors():
        if extractor.supports(path):
            return extractor
    return None


__all__ = [
    "Extractor",
    "RustExtractor",
    "SignatureParseError",
    "discover_extractors",
    "get_extractor",
]

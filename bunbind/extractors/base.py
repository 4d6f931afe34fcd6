"""Base class for signature extractors."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Tuple

from ..models import ExportedFunction


class Extractor(ABC):
    """Contract for extractors that read exported signatures from source text."""

    name: str = ""
    suffixes: Tuple[str, ...] = ()

    def supports(self, path: Path) -> bool:
        """Return True when this extractor understands files like ``path``."""
        return path.suffix.lower() in self.suffixes

    @abstractmethod
    def extract(self, source: str) -> List[ExportedFunction]:
        """Return exported functions in declaration order (empty when none)."""

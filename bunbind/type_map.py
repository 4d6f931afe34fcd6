"""Mapping from Rust type designators to ``bun:ffi`` FFIType tags."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

DEFAULT_TAG = "u64"

SCALAR_TAGS = (
    "u8",
    "u16",
    "u32",
    "u64",
    "i8",
    "i16",
    "i32",
    "i64",
    "f32",
    "f64",
    "bool",
    "void",
    "char",
)
POINTER_TAG = "ptr"
CSTRING_TAG = "cstring"

KNOWN_TAGS = frozenset(SCALAR_TAGS + (POINTER_TAG, CSTRING_TAG))


class TypeTable:
    """Total, immutable lookup from type designator to FFI tag.

    Anything missing from the table resolves to :data:`DEFAULT_TAG`, so an
    unrecognised parameter type widens to a 64-bit integer instead of
    aborting generation of the whole function.
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        if entries is None:
            entries = {tag: tag for tag in KNOWN_TAGS}
        unknown = sorted({tag for tag in entries.values() if tag not in KNOWN_TAGS})
        if unknown:
            raise ValueError(f"Unknown FFI type tags: {', '.join(unknown)}")
        self._entries = MappingProxyType(dict(entries))

    def resolve(self, designator: str) -> str:
        return self._entries.get(designator.strip(), DEFAULT_TAG)

    def with_aliases(self, aliases: Mapping[str, str]) -> "TypeTable":
        """Return a new table with extra designators layered over this one."""
        merged = dict(self._entries)
        merged.update(aliases)
        return TypeTable(merged)

    def __contains__(self, designator: object) -> bool:
        return isinstance(designator, str) and designator.strip() in self._entries

    def __len__(self) -> int:
        return len(self._entries)


DEFAULT_TYPE_TABLE = TypeTable()


__all__ = [
    "CSTRING_TAG",
    "DEFAULT_TAG",
    "DEFAULT_TYPE_TABLE",
    "KNOWN_TAGS",
    "POINTER_TAG",
    "SCALAR_TAGS",
    "TypeTable",
]

"""Target platforms and their shared-library naming conventions."""

from __future__ import annotations

import sys
from enum import Enum


class UnsupportedPlatformError(RuntimeError):
    """Raised when bindings are requested for a platform with no known naming convention."""

    def __init__(self, platform: str) -> None:
        super().__init__(f"Unsupported platform: {platform or '(empty)'}")
        self.platform = platform


class TargetPlatform(str, Enum):
    WINDOWS = "win32"
    LINUX = "linux"
    MACOS = "darwin"

    @classmethod
    def resolve(cls, name: str | None = None) -> "TargetPlatform":
        """Return the platform for ``name`` (host platform when omitted)."""
        value = sys.platform if name is None else name.strip().lower()
        # sys.platform reports "linux2" on some older interpreters
        if value.startswith("linux"):
            value = cls.LINUX.value
        for member in cls:
            if member.value == value:
                return member
        raise UnsupportedPlatformError(value)

    def library_stem(self, module_name: str) -> str:
        """Return the dlopen file stem; bun:ffi's ``suffix`` supplies the extension."""
        if self is TargetPlatform.WINDOWS:
            return module_name
        if self in (TargetPlatform.LINUX, TargetPlatform.MACOS):
            return f"lib{module_name}"
        raise UnsupportedPlatformError(self.value)


__all__ = ["TargetPlatform", "UnsupportedPlatformError"]

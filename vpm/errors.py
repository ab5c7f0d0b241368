"""Error types raised while generating build descriptors."""

from __future__ import annotations

from pathlib import Path


class VpmError(RuntimeError):
    """Base class for per-unit pipeline failures."""


class SourceNotFoundError(VpmError, FileNotFoundError):
    """Raised when a source or test source is missing at pipeline start."""

    def __init__(self, path: Path | str, *, kind: str = "Source") -> None:
        self.path = Path(path)
        self.kind = kind
        super().__init__(f"{kind} file does not exist: {self.path}")


class DescriptorWriteError(VpmError):
    """Raised when an output file cannot be opened or written."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to write {self.path}: {reason}")


__all__ = ["DescriptorWriteError", "SourceNotFoundError", "VpmError"]

"""Helper utilities for writing throwaway HDL sources in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping


class HdlBuilder:
    """Utility for writing source files into a temporary workspace."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "workspace"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the workspace."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def path(self, relative: str = "") -> Path:
        """Return the workspace root, or a path inside it."""
        return self.root / relative if relative else self.root


__all__ = ["HdlBuilder"]

"""Serialize target graphs into Bazel BUILD files."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

from .errors import DescriptorWriteError
from .models import BuildTarget, TargetGraph, TargetKind

DESCRIPTOR_FILENAME = "BUILD"

_INDENT = "    "

# Written by `vpm init`.
RULES_BZL = "//tools/verilator:defs.bzl"

# Rule keyword and the .bzl file that defines it, per target kind.
_RULES: Dict[TargetKind, Tuple[str, str]] = {
    TargetKind.PRIMARY: ("verilog_library", RULES_BZL),
    TargetKind.SIMULATION_MODEL: ("verilator_cc_library", RULES_BZL),
    TargetKind.TEST: ("verilator_cc_test", RULES_BZL),
    TargetKind.LINT: ("verilator_lint_test", RULES_BZL),
}

_DECLARATION_ORDER = (
    TargetKind.PRIMARY,
    TargetKind.SIMULATION_MODEL,
    TargetKind.TEST,
    TargetKind.LINT,
)


class DescriptorEmitter:
    """Pretty-prints a target graph in declaration order.

    Names and paths are written as literal quoted strings. Quotes inside a
    name are not escaped, so such a name produces a BUILD file the build tool
    will reject.
    """

    def __init__(self, visibility: str = "//visibility:public") -> None:
        self.visibility = visibility

    def render(self, graph: TargetGraph) -> str:
        targets = self._ordered(graph)
        blocks: List[str] = []
        loads = self._render_loads(targets)
        if loads:
            blocks.append(loads)
        blocks.extend(self._render_target(target) for target in targets)
        return "\n\n".join(blocks) + "\n"

    def write(self, graph: TargetGraph, path: Path | str) -> Path:
        """Render ``graph`` and replace whatever is stored at ``path``."""
        destination = Path(path)
        content = self.render(graph)
        try:
            with destination.open("w", encoding="utf-8") as handle:
                handle.write(content)
        except OSError as exc:
            raise DescriptorWriteError(destination, exc.strerror or str(exc)) from exc
        return destination

    @staticmethod
    def _ordered(graph: TargetGraph) -> List[BuildTarget]:
        rank = {kind: index for index, kind in enumerate(_DECLARATION_ORDER)}
        # sorted() is stable, so targets of one kind keep their insertion order.
        return sorted(graph, key=lambda target: rank[target.kind])

    @staticmethod
    def _render_loads(targets: List[BuildTarget]) -> str:
        symbols_by_file: Dict[str, List[str]] = {}
        for target in targets:
            keyword, bzl_file = _RULES[target.kind]
            symbols = symbols_by_file.setdefault(bzl_file, [])
            if keyword not in symbols:
                symbols.append(keyword)
        lines = []
        for bzl_file, symbols in symbols_by_file.items():
            quoted = ", ".join(f'"{symbol}"' for symbol in symbols)
            lines.append(f'load("{bzl_file}", {quoted})')
        return "\n".join(lines)

    def _render_target(self, target: BuildTarget) -> str:
        keyword, _ = _RULES[target.kind]
        lines = [f"{keyword}(", f'{_INDENT}name = "{target.name}",']
        if target.srcs:
            lines.append(f"{_INDENT}srcs = {self._inline_list(target.srcs)},")
        if "module_top" in target.attributes:
            lines.append(f'{_INDENT}module_top = "{target.attributes["module_top"]}",')
        if "toolchain" in target.attributes:
            lines.append(f'{_INDENT}toolchain = "{target.attributes["toolchain"]}",')
        if target.deps:
            lines.append(f"{_INDENT}deps = [")
            lines.extend(f'{_INDENT * 2}":{dep}",' for dep in target.deps)
            lines.append(f"{_INDENT}],")
        if target.public:
            lines.append(f"{_INDENT}visibility = {self._inline_list([self.visibility])},")
        lines.append(")")
        return "\n".join(lines)

    @staticmethod
    def _inline_list(values: List[str]) -> str:
        return "[" + ", ".join(f'"{value}"' for value in values) + "]"


__all__ = ["DESCRIPTOR_FILENAME", "RULES_BZL", "DescriptorEmitter"]

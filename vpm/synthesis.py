"""Descriptor synthesis: turn a source unit and its references into targets."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .config import TargetSettings
from .models import BuildTarget, SourceUnit, SynthesisMode, TargetGraph, TargetKind, TestUnit


class DescriptorSynthesizer:
    """Builds the target graph for one source unit.

    Every reference becomes a dependency edge on the like-named target. No
    existence, collision or cycle checks are made and repeated references
    are kept; resolving them is left to the build tool.
    """

    def __init__(self, settings: TargetSettings | None = None) -> None:
        self.settings = settings or TargetSettings()

    @property
    def suffixes(self) -> Dict[TargetKind, str]:
        return {
            TargetKind.PRIMARY: "",
            TargetKind.SIMULATION_MODEL: self.settings.simulation_suffix,
            TargetKind.LINT: self.settings.lint_suffix,
            TargetKind.TEST: self.settings.test_suffix,
        }

    def target_name(self, unit_name: str, kind: TargetKind) -> str:
        return f"{unit_name}{self.suffixes[kind]}"

    @staticmethod
    def mode_for(test_unit: Optional[TestUnit]) -> SynthesisMode:
        return SynthesisMode.TEST if test_unit is not None else SynthesisMode.LIBRARY

    def synthesize(
        self,
        unit: SourceUnit,
        references: Sequence[str],
        test_unit: Optional[TestUnit] = None,
    ) -> TargetGraph:
        mode = self.mode_for(test_unit)
        graph = TargetGraph(unit_name=unit.name)

        primary = self._build(
            unit.name,
            TargetKind.PRIMARY,
            srcs=[unit.filename],
            deps=self._rename(references, TargetKind.PRIMARY),
            public=True,
        )
        graph.add(primary)

        graph.add(
            self._build(
                unit.name,
                TargetKind.SIMULATION_MODEL,
                deps=[primary.name] + self._rename(references, TargetKind.SIMULATION_MODEL),
                public=True,
                attributes={"module_top": unit.name},
            )
        )

        if mode is SynthesisMode.TEST and test_unit is not None:
            graph.add(
                self._build(
                    unit.name,
                    TargetKind.TEST,
                    srcs=[test_unit.filename],
                    deps=[
                        primary.name,
                        self.target_name(unit.name, TargetKind.SIMULATION_MODEL),
                    ]
                    + self._rename(references, TargetKind.PRIMARY),
                    attributes={"toolchain": self.settings.toolchain},
                )
            )

        if self.settings.lint:
            graph.add(
                self._build(
                    unit.name,
                    TargetKind.LINT,
                    srcs=[unit.filename],
                    deps=[primary.name],
                )
            )

        return graph

    def _build(
        self,
        unit_name: str,
        kind: TargetKind,
        *,
        srcs: Sequence[str] = (),
        deps: Sequence[str] = (),
        public: bool = False,
        attributes: Dict[str, str] | None = None,
    ) -> BuildTarget:
        return BuildTarget(
            name=self.target_name(unit_name, kind),
            kind=kind,
            srcs=list(srcs),
            deps=list(deps),
            public=public,
            attributes=dict(attributes or {}),
        )

    def _rename(self, references: Sequence[str], kind: TargetKind) -> List[str]:
        return [self.target_name(reference, kind) for reference in references]


__all__ = ["DescriptorSynthesizer"]

"""Core data models shared across vpm components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .errors import SourceNotFoundError


class TargetKind(str, Enum):
    """Kinds of build targets synthesized for a source unit."""

    PRIMARY = "primary"
    SIMULATION_MODEL = "simulation_model"
    LINT = "lint"
    TEST = "test"


class SynthesisMode(str, Enum):
    """Whether a companion test source takes part in synthesis."""

    LIBRARY = "library"
    TEST = "test"


@dataclass(frozen=True)
class SourceUnit:
    """A hardware-description source file read for one pipeline invocation."""

    path: Path
    name: str
    text: str

    @property
    def filename(self) -> str:
        return self.path.name

    @classmethod
    def read(cls, path: Path | str) -> "SourceUnit":
        source_path = Path(path)
        if not source_path.is_file():
            raise SourceNotFoundError(source_path)
        text = source_path.read_text(encoding="utf-8", errors="replace")
        return cls(path=source_path, name=source_path.stem, text=text)


@dataclass(frozen=True)
class TestUnit:
    """Companion test source compiled against the unit's simulation model."""

    __test__ = False  # keep pytest from collecting this class

    path: Path
    name: str

    @property
    def filename(self) -> str:
        return self.path.name

    @classmethod
    def locate(cls, path: Path | str) -> "TestUnit":
        test_path = Path(path)
        if not test_path.is_file():
            raise SourceNotFoundError(test_path, kind="Test")
        return cls(path=test_path, name=test_path.stem)


@dataclass
class BuildTarget:
    """One named rule in the emitted descriptor.

    ``deps`` holds target names only; another target's definition is never
    embedded. ``attributes`` carries kind-specific scalar fields such as the
    top-level module name of a simulation model.
    """

    name: str
    kind: TargetKind
    srcs: List[str] = field(default_factory=list)
    deps: List[str] = field(default_factory=list)
    public: bool = False
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass
class TargetGraph:
    """Ordered set of targets synthesized for a single source unit."""

    unit_name: str
    targets: Dict[str, BuildTarget] = field(default_factory=dict)

    def add(self, target: BuildTarget) -> None:
        # Last write wins if two kinds are configured with the same suffix.
        self.targets[target.name] = target

    def get(self, name: str) -> Optional[BuildTarget]:
        return self.targets.get(name)

    def names(self) -> List[str]:
        return list(self.targets)

    def of_kind(self, kind: TargetKind) -> Optional[BuildTarget]:
        for target in self.targets.values():
            if target.kind is kind:
                return target
        return None

    def __iter__(self) -> Iterator[BuildTarget]:
        return iter(self.targets.values())

    def __len__(self) -> int:
        return len(self.targets)

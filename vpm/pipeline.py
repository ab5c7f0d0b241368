"""Pipeline orchestration: extract references, synthesize targets, emit BUILD."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .config import BATCH_ABORT, BATCH_CONTINUE, VpmConfig
from .emitter import DESCRIPTOR_FILENAME, DescriptorEmitter
from .errors import VpmError
from .extractors import InstanceExtractor, ReferenceExtractor, get_extractor
from .logging import get_logger
from .models import SourceUnit, TargetGraph, TestUnit
from .synthesis import DescriptorSynthesizer


@dataclass
class UnitOutcome:
    """Result of generating the descriptor for one source unit."""

    source: Path
    descriptor: Path
    references: List[str]
    graph: TargetGraph


@dataclass
class UnitFailure:
    """A unit whose processing stopped with an error."""

    source: Path
    reason: str
    error: Exception


@dataclass
class BatchReport:
    """Outcome of a sequential batch run."""

    outcomes: List[UnitOutcome] = field(default_factory=list)
    failures: List[UnitFailure] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures

    def latest_outcomes(self) -> List[UnitOutcome]:
        """Outcomes whose descriptor was not overwritten later in the batch."""
        latest: Dict[Path, UnitOutcome] = {}
        for outcome in self.outcomes:
            latest.pop(outcome.descriptor, None)
            latest[outcome.descriptor] = outcome
        return list(latest.values())


class Pipeline:
    """Runs extraction, synthesis and emission for source units."""

    def __init__(
        self,
        extractor: ReferenceExtractor | None = None,
        synthesizer: DescriptorSynthesizer | None = None,
        emitter: DescriptorEmitter | None = None,
    ) -> None:
        self.extractor = extractor or InstanceExtractor()
        self.synthesizer = synthesizer or DescriptorSynthesizer()
        self.emitter = emitter or DescriptorEmitter()
        self.logger = get_logger("pipeline")

    @classmethod
    def from_config(cls, config: VpmConfig) -> "Pipeline":
        return cls(
            extractor=get_extractor(config.extractor),
            synthesizer=DescriptorSynthesizer(config.targets),
            emitter=DescriptorEmitter(visibility=config.targets.visibility),
        )

    def run(self, source: Path | str, test: Path | str | None = None) -> UnitOutcome:
        """Generate the BUILD file next to ``source``."""
        source_path = Path(source).expanduser().absolute()
        test_path = Path(test).expanduser().absolute() if test is not None else None

        unit = SourceUnit.read(source_path)
        test_unit: Optional[TestUnit] = None
        if test_path is not None:
            test_unit = TestUnit.locate(test_path)

        self.logger.info("Generating %s for %s", DESCRIPTOR_FILENAME, source_path)

        references = self.extractor.extract(unit.text)
        self.logger.debug("Detected %d references in %s", len(references), unit.filename)

        graph = self.synthesizer.synthesize(unit, references, test_unit)
        mode = self.synthesizer.mode_for(test_unit)
        self.logger.debug("Synthesized %s targets: %s", mode.value, ", ".join(graph.names()))

        descriptor_path = self.emitter.write(graph, source_path.parent / DESCRIPTOR_FILENAME)
        self.logger.info("Created %s", descriptor_path)
        return UnitOutcome(
            source=source_path,
            descriptor=descriptor_path,
            references=references,
            graph=graph,
        )

    def run_batch(
        self,
        sources: Iterable[Path | str],
        test: Path | str | None = None,
        *,
        on_error: str = BATCH_CONTINUE,
    ) -> BatchReport:
        """Process ``sources`` in order; ``on_error`` decides whether a failure stops the rest."""
        if on_error not in {BATCH_CONTINUE, BATCH_ABORT}:
            raise ValueError(f"Unknown batch error policy: {on_error}")

        report = BatchReport()
        written: Dict[Path, Path] = {}
        pending = [Path(source) for source in sources]
        for index, source in enumerate(pending):
            try:
                outcome = self.run(source, test)
            except (VpmError, OSError) as exc:
                self.logger.error("Error processing file '%s': %s", source, exc)
                report.failures.append(UnitFailure(source=source, reason=str(exc), error=exc))
                if on_error == BATCH_ABORT:
                    report.aborted = True
                    report.skipped = pending[index + 1 :]
                    break
                continue

            previous = written.get(outcome.descriptor)
            if previous is not None:
                self.logger.warning(
                    "%s overwrites %s written for %s",
                    outcome.source.name,
                    outcome.descriptor,
                    previous.name,
                )
            written[outcome.descriptor] = outcome.source
            report.outcomes.append(outcome)
        return report


__all__ = ["BatchReport", "Pipeline", "UnitFailure", "UnitOutcome"]

"""CLI entrypoints for vpm commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import BATCH_ABORT, BATCH_CONTINUE, ConfigError, VpmConfig, load_config
from .errors import VpmError
from .logging import configure_logging
from .models import TargetKind
from .pipeline import BatchReport, Pipeline
from .runner import ProcessRunner
from .workspace import WorkspaceBootstrapper


def _add_common_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    verbose_kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
        "default": argparse.SUPPRESS if suppress_default else False,
    }
    parser.add_argument("-v", "--verbose", **verbose_kwargs)
    parser.add_argument(
        "--workspace",
        default=argparse.SUPPRESS if suppress_default else ".",
        help="Workspace root holding .vpm.yml (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also append DEBUG-level logs to this file.",
    )


def _add_generation_options(parser: argparse.ArgumentParser) -> None:
    policy = parser.add_mutually_exclusive_group()
    policy.add_argument(
        "--keep-going",
        dest="on_error",
        action="store_const",
        const=BATCH_CONTINUE,
        help="Continue with the remaining files when one fails.",
    )
    policy.add_argument(
        "--fail-fast",
        dest="on_error",
        action="store_const",
        const=BATCH_ABORT,
        help="Stop at the first file that fails.",
    )
    parser.add_argument(
        "--run",
        action="store_true",
        help="Invoke the build tool on the generated targets afterwards.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vpm",
        description="Generate Bazel BUILD files for SystemVerilog sources.",
    )
    _add_common_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Initialize a Bazel workspace with the Verilator toolchain.",
    )
    _add_common_options(init_parser, suppress_default=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Generate BUILD files for one or more SystemVerilog files.",
    )
    _add_common_options(build_parser, suppress_default=True)
    _add_generation_options(build_parser)
    build_parser.add_argument("files", nargs="+", help="SystemVerilog sources.")

    test_parser = subparsers.add_parser(
        "test",
        help="Generate a BUILD file with a test target for a source and its testbench.",
    )
    _add_common_options(test_parser, suppress_default=True)
    _add_generation_options(test_parser)
    test_parser.add_argument("source", help="SystemVerilog source under test.")
    test_parser.add_argument("testbench", help="Testbench source.")

    return parser


def main(argv: list[str] | None = None, *, runner: ProcessRunner | None = None) -> None:
    """CLI entrypoint for vpm commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file).expanduser() if args.log_file else None
    try:
        configure_logging(verbose=bool(args.verbose), log_file=log_file)
    except OSError as exc:
        parser.exit(1, f"Cannot open log file {log_file}: {exc}\n")

    workspace = Path(args.workspace).expanduser().resolve()
    try:
        config = load_config(workspace)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "init":
        try:
            written = WorkspaceBootstrapper(config.workspace).write(workspace)
        except VpmError as exc:
            parser.exit(1, f"Error initializing workspace: {exc}\n")
        for path in written:
            print(f"Created {_relativize(path)}")
        return

    if args.command == "build":
        files: List[str] = list(args.files)
        test_file: Optional[str] = None
    elif args.command == "test":
        files = [args.source]
        test_file = args.testbench
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    invalid = _invalid_extensions(files, config.sources.extensions)
    if test_file is not None:
        invalid += _invalid_extensions([test_file], config.sources.test_extensions, label="Test file")
    if invalid:
        parser.exit(1, "\n".join(invalid) + "\n")

    try:
        pipeline = Pipeline.from_config(config)
    except (ValueError, TypeError, RuntimeError) as exc:
        parser.exit(1, f"{exc}\n")

    on_error = args.on_error or config.batch.on_error
    report = pipeline.run_batch(files, test_file, on_error=on_error)
    _print_report(report)

    if not report.ok:
        parser.exit(1)

    if args.run:
        status = _run_build_tool(
            report,
            config,
            workspace,
            runner or ProcessRunner(),
            test=test_file is not None,
        )
        if status != 0:
            parser.exit(status)


def _invalid_extensions(
    files: Sequence[str], extensions: Sequence[str], *, label: str = "File"
) -> List[str]:
    errors = []
    allowed = ", ".join(extensions)
    for file in files:
        if Path(file).suffix.lower() not in extensions:
            errors.append(f"Error: {label} '{file}' does not have a supported extension ({allowed})")
    return errors


def _print_report(report: BatchReport) -> None:
    for outcome in report.outcomes:
        print(f"Created BUILD file at: {_relativize(outcome.descriptor)}")
        if outcome.references:
            print("Detected submodules:")
            for reference in outcome.references:
                print(f"  - {reference}")
    for failure in report.failures:
        print(f"Error processing file '{failure.source}': {failure.reason}", file=sys.stderr)
    if report.skipped:
        skipped = ", ".join(str(path) for path in report.skipped)
        print(f"Skipped after failure: {skipped}", file=sys.stderr)


def _run_build_tool(
    report: BatchReport,
    config: VpmConfig,
    workspace: Path,
    runner: ProcessRunner,
    *,
    test: bool,
) -> int:
    verb = "test" if test else "build"
    labels: List[str] = []
    # A BUILD file written twice only holds the targets of its last unit.
    for outcome in report.latest_outcomes():
        package = _package_path(outcome.descriptor.parent, workspace)
        if package is None:
            print(
                f"Error: {outcome.descriptor.parent} is outside the workspace {workspace}",
                file=sys.stderr,
            )
            return 1
        if test:
            test_target = outcome.graph.of_kind(TargetKind.TEST)
            targets = [test_target.name] if test_target is not None else []
        else:
            targets = outcome.graph.names()
        labels.extend(f"//{package}:{name}" for name in targets)
    if not labels:
        return 0
    command = " ".join([config.build.command, verb, *labels])
    return runner.run(command, cwd=workspace)


def _package_path(directory: Path, workspace: Path) -> Optional[str]:
    try:
        relative = directory.resolve().relative_to(workspace.resolve())
    except ValueError:
        return None
    package = relative.as_posix()
    return "" if package == "." else package


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])

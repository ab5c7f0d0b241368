"""CLI behaviour tests."""

from __future__ import annotations

import re

import pytest

from vpm.cli import _build_parser, main
from vpm.emitter import RULES_BZL
from vpm.runner import ProcessRunner


class RecordingRunner(ProcessRunner):
    """Runner double that records commands instead of executing them."""

    def __init__(self, status: int = 0) -> None:
        self.commands: list[tuple[str, object]] = []

        def _record(command, cwd=None):
            self.commands.append((command, cwd))
            return status

        super().__init__(runner=_record)


def _accepted_fields(defs: str, symbol: str) -> set[str]:
    rule = re.search(rf"^{symbol} = rule\(\n(.*?)^\)", defs, re.M | re.S)
    if rule:
        return set(re.findall(r'^        "(\w+)": attr\.', rule.group(1), re.M))
    macro = re.search(rf"^def {symbol}\(([^)]*)\):", defs, re.M)
    assert macro, f"{symbol} is not defined in {RULES_BZL}"
    return {param.split("=")[0].strip() for param in macro.group(1).split(",")}


def test_cli_accepts_verbose_before_and_after_command() -> None:
    parser = _build_parser()
    assert parser.parse_args(["--verbose", "build", "a.sv"]).verbose is True
    assert parser.parse_args(["build", "--verbose", "a.sv"]).verbose is True


def test_cli_build_accepts_multiple_files_and_policy() -> None:
    args = _build_parser().parse_args(["build", "--fail-fast", "a.sv", "b.sv"])
    assert args.command == "build"
    assert args.files == ["a.sv", "b.sv"]
    assert args.on_error == "abort"


def test_cli_test_requires_source_and_testbench() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["test", "counter.sv"])


def test_cli_init_writes_workspace(hdl_builder, capsys) -> None:
    main(["init", "--workspace", str(hdl_builder.path())])

    assert hdl_builder.path("WORKSPACE").exists()
    assert "WORKSPACE" in capsys.readouterr().out


def test_cli_build_generates_descriptor_and_lists_submodules(hdl_builder, capsys) -> None:
    hdl_builder.write({"rtl/counter.sv": "adder u1(.a(a));\nmux u2(.b(b));\n"})

    main(["build", "--workspace", str(hdl_builder.path()), str(hdl_builder.path("rtl/counter.sv"))])

    assert hdl_builder.path("rtl/BUILD").exists()
    out = capsys.readouterr().out
    assert "Detected submodules:\n  - adder\n  - mux\n" in out


def test_cli_rejects_unsupported_extension(hdl_builder) -> None:
    hdl_builder.write({"counter.vhd": "adder u1(.a(a));\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["build", "--workspace", str(hdl_builder.path()), str(hdl_builder.path("counter.vhd"))])

    assert excinfo.value.code == 1
    assert not hdl_builder.path("BUILD").exists()


def test_cli_exits_non_zero_when_a_unit_fails(hdl_builder, capsys) -> None:
    hdl_builder.write({"good.sv": "adder u1(.a(a));\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(
            [
                "build",
                "--workspace",
                str(hdl_builder.path()),
                str(hdl_builder.path("missing.sv")),
                str(hdl_builder.path("good.sv")),
            ]
        )

    assert excinfo.value.code == 1
    assert hdl_builder.path("BUILD").exists()
    assert "missing.sv" in capsys.readouterr().err


def test_cli_test_run_invokes_bazel_test(hdl_builder) -> None:
    hdl_builder.write(
        {
            "rtl/counter.sv": "adder u1(.a(a));\n",
            "rtl/counter_tb.cpp": "int main() { return 0; }\n",
        }
    )
    runner = RecordingRunner()

    main(
        [
            "test",
            "--workspace",
            str(hdl_builder.path()),
            "--run",
            str(hdl_builder.path("rtl/counter.sv")),
            str(hdl_builder.path("rtl/counter_tb.cpp")),
        ],
        runner=runner,
    )

    assert runner.commands == [("bazel test //rtl:counter_test", hdl_builder.path().resolve())]


def test_cli_build_run_propagates_failure_status(hdl_builder) -> None:
    hdl_builder.write({"counter.sv": "adder u1(.a(a));\n"})
    runner = RecordingRunner(status=2)

    with pytest.raises(SystemExit) as excinfo:
        main(
            ["build", "--workspace", str(hdl_builder.path()), "--run", str(hdl_builder.path("counter.sv"))],
            runner=runner,
        )

    assert excinfo.value.code == 2
    assert runner.commands == [("bazel build //:counter //:counter_verilated", hdl_builder.path().resolve())]


def test_cli_build_run_targets_only_the_last_unit_of_a_shared_build_file(hdl_builder, capsys) -> None:
    hdl_builder.write({"rtl/a.sv": "adder u1(.a(a));\n", "rtl/b.sv": "mux u2(.b(b));\n"})
    runner = RecordingRunner()

    main(
        [
            "build",
            "--workspace",
            str(hdl_builder.path()),
            "--run",
            str(hdl_builder.path("rtl/a.sv")),
            str(hdl_builder.path("rtl/b.sv")),
        ],
        runner=runner,
    )

    assert runner.commands == [("bazel build //rtl:b //rtl:b_verilated", hdl_builder.path().resolve())]
    assert 'name = "a"' not in hdl_builder.path("rtl/BUILD").read_text(encoding="utf-8")
    assert "b.sv overwrites" in capsys.readouterr().err


def test_cli_log_file_records_debug_output_without_verbose(hdl_builder, capsys) -> None:
    hdl_builder.write({"counter.sv": "adder u1(.a(a));\nmux u2(.b(b));\n"})
    log_file = hdl_builder.path("logs/vpm.log")

    main(
        [
            "build",
            "--workspace",
            str(hdl_builder.path()),
            "--log-file",
            str(log_file),
            str(hdl_builder.path("counter.sv")),
        ]
    )

    logged = log_file.read_text(encoding="utf-8")
    assert "INFO    vpm.pipeline: Generating BUILD for" in logged
    assert "DEBUG   vpm.pipeline: Detected 2 references in counter.sv" in logged
    assert "Detected 2 references" not in capsys.readouterr().err


def test_cli_exits_when_log_file_cannot_be_opened(hdl_builder) -> None:
    hdl_builder.write({"logs": "a file, not a directory\n", "counter.sv": "adder u1(.a(a));\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(
            [
                "build",
                "--log-file",
                str(hdl_builder.path("logs/vpm.log")),
                str(hdl_builder.path("counter.sv")),
            ]
        )

    assert excinfo.value.code == 1
    assert not hdl_builder.path("BUILD").exists()


def test_init_then_test_produces_a_loadable_build_file(hdl_builder) -> None:
    hdl_builder.write(
        {
            ".vpm.yml": "targets:\n  lint: true\n",
            "rtl/counter.sv": "adder u1(.a(a));\n",
            "rtl/counter_tb.cpp": "int main() { return 0; }\n",
        }
    )
    root = hdl_builder.path()

    main(["init", "--workspace", str(root)])
    main(
        [
            "test",
            "--workspace",
            str(root),
            str(hdl_builder.path("rtl/counter.sv")),
            str(hdl_builder.path("rtl/counter_tb.cpp")),
        ]
    )

    workspace_text = (root / "WORKSPACE").read_text(encoding="utf-8")
    blocks = hdl_builder.path("rtl/BUILD").read_text(encoding="utf-8").rstrip("\n").split("\n\n")
    loads = re.findall(r'^load\("//([\w/]*):([\w.]+)", (.+)\)$', blocks[0], re.M)
    assert loads

    accepted: dict[str, set[str]] = {}
    for package, filename, symbols in loads:
        assert (root / package / "BUILD").is_file()
        defs = (root / package / filename).read_text(encoding="utf-8")
        for repository in re.findall(r'load\("@(\w+)//', defs):
            assert f'name = "{repository}",' in workspace_text
        for symbol in re.findall(r'"(\w+)"', symbols):
            accepted[symbol] = _accepted_fields(defs, symbol)

    keywords = []
    for block in blocks[1:]:
        keyword = block.split("(", 1)[0]
        keywords.append(keyword)
        for field in re.findall(r"^    (\w+) = ", block, re.M):
            assert field in accepted[keyword] | {"name", "visibility"}, (keyword, field)
    assert keywords == ["verilog_library", "verilator_cc_library", "verilator_cc_test", "verilator_lint_test"]

    repository, target = re.search(r'toolchain = "@(\w+)//:(\w+)"', "\n".join(blocks)).groups()
    assert f'name = "{repository}",' in workspace_text
    runtime_build = (root / "tools" / "verilator" / "verilator.BUILD").read_text(encoding="utf-8")
    assert f'name = "{target}",' in runtime_build

"""Tests for vpm.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from vpm.logging import configure_logging, get_logger


def test_get_logger_nests_under_package_logger() -> None:
    assert get_logger().name == "vpm"
    assert get_logger("pipeline").name == "vpm.pipeline"


def test_reconfiguring_replaces_handlers(tmp_path: Path) -> None:
    configure_logging(log_file=tmp_path / "first.log")
    logger = configure_logging(verbose=True)

    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.DEBUG
    assert logger.propagate is False


def test_log_file_is_appended(tmp_path: Path) -> None:
    log_file = tmp_path / "nested" / "vpm.log"
    log_file.parent.mkdir()
    log_file.write_text("earlier run\n", encoding="utf-8")

    configure_logging(log_file=log_file)
    get_logger("workspace").debug("Rendered %d files", 4)

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "earlier run"
    assert lines[1].endswith("DEBUG   vpm.workspace: Rendered 4 files")


def test_log_file_parent_is_created(tmp_path: Path) -> None:
    log_file = tmp_path / "a" / "b" / "vpm.log"

    configure_logging(log_file=log_file)
    get_logger().info("ready")

    assert log_file.read_text(encoding="utf-8").rstrip().endswith("INFO    vpm: ready")

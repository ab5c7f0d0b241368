"""Process execution for the downstream build tool."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable

from .logging import get_logger

CommandRunner = Callable[..., int]


class ProcessRunner:
    """Runs shell commands synchronously and reports their exit status."""

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("runner")

    def run(self, command: str, *, cwd: Path | None = None) -> int:
        self.logger.info("Running: %s", command)
        status = self._runner(command, cwd=cwd)
        if status != 0:
            self.logger.error("Command exited with status %d: %s", status, command)
        return status

    @staticmethod
    def _default_runner(command: str, *, cwd: Path | None = None) -> int:
        completed = subprocess.run(
            command,
            shell=True,
            cwd=str(cwd) if cwd is not None else None,
            check=False,
        )
        return completed.returncode


__all__ = ["CommandRunner", "ProcessRunner"]

"""Workspace bootstrap: WORKSPACE, Verilator repository files and rule definitions."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .config import WorkspaceSettings
from .errors import DescriptorWriteError
from .logging import get_logger

# Output path (relative to the workspace root) -> template name.
_OUTPUTS: Dict[str, str] = {
    "WORKSPACE": "WORKSPACE.j2",
    "tools/verilator/BUILD": "tools_BUILD.j2",
    "tools/verilator/defs.bzl": "defs.bzl.j2",
    "tools/verilator/verilator.BUILD": "verilator.BUILD.j2",
}


class WorkspaceBootstrapper:
    """Renders the one-off files: repository registrations and the rules generated BUILD files load."""

    def __init__(
        self,
        settings: WorkspaceSettings | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        self.settings = settings or WorkspaceSettings()
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.logger = get_logger("workspace")

    def render(self) -> Dict[str, str]:
        """Return ``relative path -> content`` for every bootstrap file."""
        context = {
            "name": self.settings.name,
            "repositories": self.settings.repositories,
            "verilator": self.settings.verilator,
        }
        rendered: Dict[str, str] = {}
        for relative, template_name in _OUTPUTS.items():
            template = self._env.get_template(template_name)
            rendered[relative] = template.render(**context).strip() + "\n"
        return rendered

    def write(self, root: Path | str) -> List[Path]:
        """Write the bootstrap files under ``root``, replacing existing ones."""
        workspace_root = Path(root)
        written: List[Path] = []
        for relative, content in self.render().items():
            destination = workspace_root / relative
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_text(content, encoding="utf-8")
            except OSError as exc:
                raise DescriptorWriteError(destination, exc.strerror or str(exc)) from exc
            self.logger.info("Created %s", destination)
            written.append(destination)
        return written


__all__ = ["WorkspaceBootstrapper"]

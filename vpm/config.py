"""Configuration loading for vpm (.vpm.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".vpm.yml"

BATCH_CONTINUE = "continue"
BATCH_ABORT = "abort"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class TargetSettings:
    """Target naming and attribute settings."""

    simulation_suffix: str = "_verilated"
    test_suffix: str = "_test"
    lint_suffix: str = "_lint"
    lint: bool = False
    visibility: str = "//visibility:public"
    toolchain: str = "@verilator//:verilator_runtime"


@dataclass
class SourceSettings:
    """File extensions accepted by the command line front end."""

    extensions: List[str] = field(default_factory=lambda: [".sv", ".v"])
    test_extensions: List[str] = field(default_factory=lambda: [".cpp", ".cc", ".sv"])


@dataclass
class BatchSettings:
    """How a batch reacts when one unit fails."""

    on_error: str = BATCH_CONTINUE


@dataclass
class Repository:
    """Third-party repository registered in the WORKSPACE file."""

    name: str
    url: str
    strip_prefix: str
    sha256: Optional[str] = None
    comment: Optional[str] = None


@dataclass
class VerilatorSettings:
    """Local Verilator installation exposed as a repository."""

    version: str = "5.026"
    path: str = "/usr/local/Cellar/verilator/5.026"


def _default_repositories() -> List[Repository]:
    return [
        Repository(
            name="rules_cc",
            url="https://github.com/bazelbuild/rules_cc/archive/refs/tags/0.0.9.tar.gz",
            strip_prefix="rules_cc-0.0.9",
            sha256="2037875b9a4456dce4a79d112a8ae885bbc4aad968e6587dca6e64f3a0900cdf",
            comment="C++ rules (needed for Verilator)",
        ),
        Repository(
            name="gtest",
            url="https://github.com/google/googletest/archive/refs/tags/v1.14.0.tar.gz",
            strip_prefix="googletest-1.14.0",
            sha256="8ad598c73ad796e0d8280b082cebd82a630d73e73cd3c70057938a6501bba5d7",
            comment="Google Test",
        ),
    ]


@dataclass
class WorkspaceSettings:
    """Inputs for the WORKSPACE bootstrap file."""

    name: str = "verilog_workspace"
    repositories: List[Repository] = field(default_factory=_default_repositories)
    verilator: VerilatorSettings = field(default_factory=VerilatorSettings)


@dataclass
class BuildSettings:
    """Downstream build tool invoked by `--run`."""

    command: str = "bazel"


@dataclass
class VpmConfig:
    """Represents the settings defined in .vpm.yml."""

    root: Path
    extractor: Optional[str] = None
    targets: TargetSettings = field(default_factory=TargetSettings)
    sources: SourceSettings = field(default_factory=SourceSettings)
    batch: BatchSettings = field(default_factory=BatchSettings)
    workspace: WorkspaceSettings = field(default_factory=WorkspaceSettings)
    build: BuildSettings = field(default_factory=BuildSettings)


def load_config(config_path: Path) -> VpmConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return VpmConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = VpmConfig(root=root)

    config.extractor = _as_str(data.get("extractor"))

    target_data = _as_dict(data.get("targets"))
    if target_data:
        defaults = TargetSettings()
        config.targets = TargetSettings(
            simulation_suffix=_as_str(target_data.get("simulation_suffix"))
            or defaults.simulation_suffix,
            test_suffix=_as_str(target_data.get("test_suffix")) or defaults.test_suffix,
            lint_suffix=_as_str(target_data.get("lint_suffix")) or defaults.lint_suffix,
            lint=bool(_as_bool(target_data.get("lint"))),
            visibility=_as_str(target_data.get("visibility")) or defaults.visibility,
            toolchain=_as_str(target_data.get("toolchain")) or defaults.toolchain,
        )

    source_data = _as_dict(data.get("sources"))
    if source_data:
        if "extensions" in source_data:
            config.sources.extensions = _as_extension_list(source_data.get("extensions"))
        if "test_extensions" in source_data:
            config.sources.test_extensions = _as_extension_list(
                source_data.get("test_extensions")
            )

    batch_data = _as_dict(data.get("batch"))
    if batch_data:
        on_error = (_as_str(batch_data.get("on_error")) or BATCH_CONTINUE).lower()
        if on_error not in {BATCH_CONTINUE, BATCH_ABORT}:
            raise ConfigError(
                f"batch.on_error must be '{BATCH_CONTINUE}' or '{BATCH_ABORT}', got '{on_error}'"
            )
        config.batch = BatchSettings(on_error=on_error)

    workspace_data = _as_dict(data.get("workspace"))
    if workspace_data:
        config.workspace = _parse_workspace(workspace_data)

    build_data = _as_dict(data.get("build"))
    if build_data:
        config.build = BuildSettings(
            command=_as_str(build_data.get("command")) or BuildSettings().command
        )

    return config


def _parse_workspace(data: Dict[str, Any]) -> WorkspaceSettings:
    settings = WorkspaceSettings()
    name = _as_str(data.get("name"))
    if name:
        settings.name = name

    verilator_data = _as_dict(data.get("verilator"))
    if verilator_data:
        version = _as_str(verilator_data.get("version")) or settings.verilator.version
        path = _as_str(verilator_data.get("path"))
        if not path:
            path = f"/usr/local/Cellar/verilator/{version}"
        settings.verilator = VerilatorSettings(version=version, path=path)

    if "repositories" in data:
        raw_repositories = data.get("repositories")
        if not isinstance(raw_repositories, list):
            raise ConfigError("workspace.repositories must be a list")
        repositories: List[Repository] = []
        for index, entry in enumerate(raw_repositories):
            repositories.append(_parse_repository(entry, index))
        settings.repositories = repositories

    return settings


def _parse_repository(entry: Any, index: int) -> Repository:
    entry_data = _as_dict(entry)
    missing = [
        key
        for key in ("name", "url", "strip_prefix")
        if not _as_str(entry_data.get(key))
    ]
    if missing:
        raise ConfigError(
            f"workspace.repositories[{index}] is missing: {', '.join(missing)}"
        )
    return Repository(
        name=str(entry_data["name"]),
        url=str(entry_data["url"]),
        strip_prefix=str(entry_data["strip_prefix"]),
        sha256=_as_str(entry_data.get("sha256")),
        comment=_as_str(entry_data.get("comment")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


def _as_extension_list(value: Any) -> List[str]:
    extensions = []
    for item in _as_str_list(value):
        cleaned = item.strip().lower()
        if not cleaned:
            continue
        extensions.append(cleaned if cleaned.startswith(".") else f".{cleaned}")
    return extensions

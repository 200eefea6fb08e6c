"""Configuration management for fortscan.

Settings are loaded from three sources in order of priority:
1. Environment variables (highest priority)
2. Project-level config: .fortscan/config.toml
3. Global config: ~/.config/fortscan/config.toml (lowest priority)
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rich.console import Console

from fortscan.exceptions import ConfigError
from fortscan.model import Executable

console = Console(stderr=True)

_GLOBAL_CONFIG_DIR = Path.home() / ".config" / "fortscan"
_GLOBAL_CONFIG_PATH = _GLOBAL_CONFIG_DIR / "config.toml"

DEFAULT_TEST_NAME = "runTests"


@dataclass
class ScanConfig:
    """fortscan configuration.

    Attributes:
        project_dir: Root directory of the project.
        name: Project name; names the default executable.
        library_dir: Library sources, scanned with Library scope.
        app_dir: Application sources, scanned with App scope.
        test_dir: Test sources, scanned with Test scope.
        dependency_dirs: Source directories of already-fetched dependencies.
        auto_executables: Keep every program found under app_dir.
        auto_tests: Keep every program found under test_dir.
        executables: Declared application executables.
        tests: Declared test executables.
        fortran_extensions: Free-form Fortran suffixes to scan.
        log_level: Console verbosity. DEBUG adds per-file lines; WARNING
            and ERROR drop the scan and resolve summaries.
        output_dir: Where the resolved source snapshot is written.
    """

    project_dir: Path = field(default_factory=Path.cwd)
    name: str = ""
    library_dir: str = "src"
    app_dir: str = "app"
    test_dir: str = "test"
    dependency_dirs: list[str] = field(default_factory=list)
    auto_executables: bool = True
    auto_tests: bool = True
    executables: list[Executable] = field(default_factory=list)
    tests: list[Executable] = field(default_factory=list)
    fortran_extensions: list[str] = field(default_factory=lambda: [".f90"])
    log_level: str = "INFO"
    output_dir: Path = field(default_factory=lambda: Path(".fortscan"))

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.project_dir.resolve().name


def load_config(project_dir: Path) -> ScanConfig:
    """Load configuration from env vars, project config, and global config.

    Priority: env vars > .fortscan/config.toml > ~/.config/fortscan/config.toml

    Args:
        project_dir: Root directory of the project.

    Returns:
        A fully resolved ScanConfig instance.

    Raises:
        ConfigError: If an executable or test table is malformed.
    """
    config = ScanConfig(project_dir=project_dir)

    # Layer 1: Global config (lowest priority)
    _apply_toml(config, _load_toml(_GLOBAL_CONFIG_PATH))

    # Layer 2: Project config
    _apply_toml(config, _load_toml(project_dir / ".fortscan" / "config.toml"))

    # Layer 3: Environment variables (highest priority)
    _apply_env(config)

    return config


def default_executables(config: ScanConfig) -> list[Executable]:
    """Declared executables, or app/main.f90 named after the project."""
    if config.executables:
        return config.executables
    if (config.project_dir / config.app_dir / "main.f90").is_file():
        return [Executable(name=config.name, source_dir=config.app_dir)]
    return []


def default_tests(config: ScanConfig) -> list[Executable]:
    """Declared tests, or test/main.f90 named runTests."""
    if config.tests:
        return config.tests
    if (config.project_dir / config.test_dir / "main.f90").is_file():
        return [Executable(name=DEFAULT_TEST_NAME, source_dir=config.test_dir)]
    return []


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file, returning an empty dict if missing or invalid."""
    if not path.is_file():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError) as exc:
        console.print(f"[yellow]Warning:[/yellow] Could not parse {path}: {exc}")
        return {}


def _parse_executables(entries: Any, table: str, default_dir: str) -> list[Executable]:
    """Turn a list of TOML tables into Executable declarations."""
    if not isinstance(entries, list):
        raise ConfigError(f"[[{table}]] must be an array of tables")

    executables: list[Executable] = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ConfigError(f"Every [[{table}]] entry needs a name")
        dependencies = entry.get("dependencies", {})
        if not isinstance(dependencies, dict):
            raise ConfigError(f"[[{table}]] dependencies must be a table")
        executables.append(
            Executable(
                name=str(entry["name"]),
                source_dir=str(entry.get("source-dir", entry.get("source_dir", default_dir))),
                main=str(entry.get("main", "main.f90")),
                dependencies={str(k): str(v) for k, v in dependencies.items()},
            )
        )
    return executables


def _apply_toml(config: ScanConfig, settings: dict[str, Any]) -> None:
    """Merge TOML settings into a ScanConfig (only set present values)."""
    if "name" in settings:
        config.name = str(settings["name"])
    if "library_dir" in settings:
        config.library_dir = str(settings["library_dir"])
    if "app_dir" in settings:
        config.app_dir = str(settings["app_dir"])
    if "test_dir" in settings:
        config.test_dir = str(settings["test_dir"])
    if "dependency_dirs" in settings:
        if not isinstance(settings["dependency_dirs"], list):
            raise ConfigError("dependency_dirs must be an array of paths")
        config.dependency_dirs = [str(d) for d in settings["dependency_dirs"]]
    if "auto_executables" in settings:
        config.auto_executables = bool(settings["auto_executables"])
    if "auto_tests" in settings:
        config.auto_tests = bool(settings["auto_tests"])
    if "executable" in settings:
        config.executables = _parse_executables(settings["executable"], "executable", config.app_dir)
    if "test" in settings:
        config.tests = _parse_executables(settings["test"], "test", config.test_dir)
    if "fortran_extensions" in settings:
        if not isinstance(settings["fortran_extensions"], list):
            raise ConfigError("fortran_extensions must be an array of suffixes")
        config.fortran_extensions = [str(e).lower() for e in settings["fortran_extensions"]]
    if "log_level" in settings:
        config.log_level = str(settings["log_level"]).upper()
    if "output_dir" in settings:
        config.output_dir = Path(settings["output_dir"])


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _apply_env(config: ScanConfig) -> None:
    """Override config with environment variables where set."""
    if log_level := os.environ.get("FORTSCAN_LOG_LEVEL"):
        config.log_level = log_level.upper()
    if library_dir := os.environ.get("FORTSCAN_LIBRARY_DIR"):
        config.library_dir = library_dir
    if auto_exe := os.environ.get("FORTSCAN_AUTO_EXECUTABLES"):
        config.auto_executables = _env_flag(auto_exe)
    if auto_tests := os.environ.get("FORTSCAN_AUTO_TESTS"):
        config.auto_tests = _env_flag(auto_tests)

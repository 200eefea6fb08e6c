"""Project-level source assembly, resolution and snapshot persistence."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.console import Console

from fortscan.config import ScanConfig, default_executables, default_tests
from fortscan.exceptions import FortscanError
from fortscan.model import Executable, Scope, SourceFile, SourceSet, UnitKind
from fortscan.sources.assembler import add_executable_sources, add_sources_from_dir
from fortscan.sources.resolver import build_order, resolve_module_dependencies
from fortscan.sources.scanner import SourceScanner

console = Console(stderr=True)

_QUIET_LEVELS = ("WARNING", "ERROR")


class ProjectBuilder:
    """Assembles, resolves and persists the source set of one project."""

    def __init__(self, config: ScanConfig) -> None:
        """Initialize the builder.

        Args:
            config: Resolved configuration; its project_dir is the root.
        """
        self._config = config
        self._project_dir = config.project_dir.resolve()
        self._scanner = SourceScanner(config.fortran_extensions)
        self._quiet = config.log_level in _QUIET_LEVELS

    @property
    def snapshot_path(self) -> Path:
        """Path to the persisted source snapshot."""
        return self._project_dir / self._config.output_dir / "sources.json"

    def build(self, save: bool = True) -> SourceSet:
        """Scan every configured directory and resolve module dependencies.

        Args:
            save: Persist the resolved set to snapshot_path.

        Returns:
            The resolved SourceSet.

        Raises:
            FortscanError: On the first parse, read or resolution failure.
        """
        if not self._quiet:
            console.print(
                f"[bold blue]Scanner[/bold blue] assembling sources for {self._config.name}..."
            )

        sources = SourceSet()
        library_dir = self._project_dir / self._config.library_dir
        if library_dir.is_dir():
            add_sources_from_dir(
                sources, library_dir, Scope.LIBRARY, scanner=self._scanner, quiet=self._quiet
            )

        for dep_dir in self._config.dependency_dirs:
            add_sources_from_dir(
                sources,
                self._project_dir / dep_dir,
                Scope.DEPENDENCY,
                scanner=self._scanner,
                quiet=self._quiet,
            )

        self._add_programs(
            sources,
            self._config.app_dir,
            Scope.APP,
            default_executables(self._config),
            self._config.auto_executables,
        )
        self._add_programs(
            sources,
            self._config.test_dir,
            Scope.TEST,
            default_tests(self._config),
            self._config.auto_tests,
        )

        resolve_module_dependencies(sources, quiet=self._quiet)

        if self._config.log_level == "DEBUG":
            for source in sources:
                deps = ", ".join(self._relative(d.path) for d in sources.dependencies_of(source))
                console.print(
                    f"[dim]{self._relative(source.path)}[/dim] {source.unit_kind.value} "
                    f"({source.scope.value}) -> {deps or '-'}"
                )

        if save:
            self.save(sources)
        return sources

    def order(self, sources: SourceSet | None = None) -> list[SourceFile]:
        """Build order of a resolved set (built from scratch if not given)."""
        return build_order(sources if sources is not None else self.build(save=False))

    def save(self, sources: SourceSet) -> None:
        """Serialize a resolved set to the snapshot file."""
        data: dict[str, Any] = {
            "last_updated": datetime.now(timezone.utc).isoformat(),
            "project": self._config.name,
            "sources": [
                {
                    "path": self._relative(s.path),
                    "unit_kind": s.unit_kind.value,
                    "scope": s.scope.value,
                    "provided_units": s.provided_units,
                    "used_units": s.used_units,
                    "include_paths": s.include_paths,
                    "executable_name": s.executable_name,
                    "file_dependencies": [
                        self._relative(d.path) for d in sources.dependencies_of(s)
                    ],
                }
                for s in sources
            ],
        }
        try:
            self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
            self.snapshot_path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as exc:
            raise FortscanError(f"Cannot write snapshot: {exc}") from exc

    def load(self) -> SourceSet | None:
        """Load a previously persisted snapshot.

        Returns:
            A resolved SourceSet, or None if no snapshot exists.

        Raises:
            FortscanError: If the snapshot is corrupt.
        """
        if not self.snapshot_path.is_file():
            return None

        try:
            data: dict[str, Any] = json.loads(self.snapshot_path.read_text(encoding="utf-8"))
            entries = data.get("sources", [])
            sources = SourceSet(
                SourceFile(
                    path=self._project_dir / e["path"],
                    unit_kind=UnitKind(e["unit_kind"]),
                    scope=Scope(e["scope"]),
                    provided_units=list(e["provided_units"]),
                    used_units=list(e["used_units"]),
                    include_paths=list(e["include_paths"]),
                    executable_name=e.get("executable_name"),
                )
                for e in entries
            )
            for source, entry in zip(sources, entries):
                source.file_dependencies = [
                    sources.index_of(self._project_dir / dep) for dep in entry["file_dependencies"]
                ]
            return sources
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise FortscanError(f"Corrupt snapshot at {self.snapshot_path}: {exc}") from exc

    def _add_programs(
        self,
        sources: SourceSet,
        directory: str,
        scope: Scope,
        declared: list[Executable],
        auto_discover: bool,
    ) -> None:
        """Fold in declared executables, then auto-discovered programs."""
        if declared:
            add_executable_sources(
                sources,
                declared,
                scope,
                auto_discover,
                root=self._project_dir,
                scanner=self._scanner,
                quiet=self._quiet,
            )

        program_dir = self._project_dir / directory
        if auto_discover and program_dir.is_dir():
            add_sources_from_dir(
                sources,
                program_dir,
                scope,
                with_executables=True,
                scanner=self._scanner,
                quiet=self._quiet,
            )

    def _relative(self, path: Path) -> str:
        try:
            rel = path.resolve().relative_to(self._project_dir)
        except ValueError:
            rel = path
        return str(rel).replace("\\", "/")

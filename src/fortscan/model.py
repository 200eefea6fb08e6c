"""Source model shared by the scanners, assembler and resolver."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class UnitKind(str, Enum):
    """Compilation-unit kind of a single source file."""

    UNKNOWN = "unknown"
    PROGRAM = "program"
    MODULE = "module"
    SUBMODULE = "submodule"
    SUBPROGRAM = "subprogram"
    C_SOURCE = "c_source"
    C_HEADER = "c_header"


class Scope(str, Enum):
    """Visibility class of the component a file belongs to."""

    UNKNOWN = "unknown"
    LIBRARY = "library"
    DEPENDENCY = "dependency"
    APP = "app"
    TEST = "test"

    @property
    def is_global(self) -> bool:
        """Library and dependency units are visible from every scope."""
        return self in (Scope.LIBRARY, Scope.DEPENDENCY)


@dataclass
class SourceFile:
    """One physical file under scan.

    Attributes:
        path: File path; identity key within a SourceSet.
        unit_kind: Kind decided by the scanner.
        scope: Compilation scope assigned at assembly time.
        provided_units: Lower-cased module/submodule names defined here.
        used_units: Lower-cased module names this file depends on.
        include_paths: Raw textual include targets.
        executable_name: Name of the executable built from this program unit.
        file_dependencies: Indices into the owning SourceSet, filled by the resolver.
    """

    path: Path
    unit_kind: UnitKind = UnitKind.UNKNOWN
    scope: Scope = Scope.UNKNOWN
    provided_units: list[str] = field(default_factory=list)
    used_units: list[str] = field(default_factory=list)
    include_paths: list[str] = field(default_factory=list)
    executable_name: str | None = None
    file_dependencies: list[int] = field(default_factory=list)

    @property
    def directory(self) -> Path:
        """Directory containing this file."""
        return self.path.parent


@dataclass
class Executable:
    """An executable declaration consumed by the assembler.

    Only name, source_dir and main take part in source assembly; the
    per-entry dependency table is carried for the build driver.
    """

    name: str
    source_dir: str = "app"
    main: str = "main.f90"
    dependencies: dict[str, str] = field(default_factory=dict)


class SourceSet:
    """Append-only collection of SourceFile entries keyed by path.

    Dependency edges are stored as indices into this collection, so they
    stay valid when more files are appended later.
    """

    def __init__(self, files: Iterable[SourceFile] = ()) -> None:
        self._files: list[SourceFile] = []
        self._by_path: dict[Path, int] = {}
        self.extend(files)

    def add(self, source: SourceFile) -> int:
        """Append a file and return its index.

        Raises:
            ValueError: If a file with the same path is already present.
        """
        if source.path in self._by_path:
            raise ValueError(f"Duplicate source file: {source.path}")
        self._by_path[source.path] = len(self._files)
        self._files.append(source)
        return len(self._files) - 1

    def extend(self, sources: Iterable[SourceFile]) -> None:
        for source in sources:
            self.add(source)

    def index_of(self, path: Path) -> int:
        return self._by_path[path]

    def paths(self) -> set[Path]:
        return set(self._by_path)

    def dependencies_of(self, source: SourceFile) -> list[SourceFile]:
        """Resolve a file's dependency indices back to SourceFile entries."""
        return [self._files[i] for i in source.file_dependencies]

    def __contains__(self, item: object) -> bool:
        if isinstance(item, SourceFile):
            return item.path in self._by_path
        if isinstance(item, (str, Path)):
            return Path(item) in self._by_path
        return False

    def __getitem__(self, index: int) -> SourceFile:
        return self._files[index]

    def __iter__(self) -> Iterator[SourceFile]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

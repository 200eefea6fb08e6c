"""Source assembly: scan directories into a project's SourceSet."""

from __future__ import annotations

import os
from collections.abc import Collection, Sequence
from pathlib import Path

from rich.console import Console

from fortscan.model import Executable, Scope, SourceFile, SourceSet, UnitKind
from fortscan.sources.parser import CParser, FortranParser
from fortscan.sources.scanner import SourceScanner

console = Console(stderr=True)


def _canon(path: str | Path) -> Path:
    return Path(os.path.normpath(path))


def enumerate_sources(
    existing: Collection[Path],
    directory: Path,
    scope: Scope,
    with_executables: bool = False,
    scanner: SourceScanner | None = None,
) -> list[SourceFile]:
    """Scan a directory and classify every source not already known.

    Args:
        existing: Paths already in the caller's set; skipped.
        directory: Directory to walk recursively.
        scope: Compilation scope applied to every new file.
        with_executables: Keep program units and name them after their file.
        scanner: Scanner to use; a default one handles ``.f90``, ``.c`` and ``.h``.

    Returns:
        The new files in discovery order; programs are dropped unless
        with_executables is True.

    Raises:
        ParseError: On the first malformed statement; nothing is returned.
        SourceReadError: If the directory or a file cannot be read.
    """
    scanner = scanner or SourceScanner()
    fortran = FortranParser()
    c_family = CParser()

    found: list[SourceFile] = []
    for path in scanner.scan(directory, recurse=True, exclude=existing):
        if scanner.is_fortran(path):
            source = fortran.parse_file(path)
        else:
            source = c_family.parse_file(path)
        source.scope = scope

        if source.unit_kind is UnitKind.PROGRAM:
            if not with_executables:
                continue
            source.executable_name = path.stem
        found.append(source)

    return found


def add_sources_from_dir(
    sources: SourceSet,
    directory: Path,
    scope: Scope,
    with_executables: bool = False,
    scanner: SourceScanner | None = None,
    quiet: bool = False,
) -> list[SourceFile]:
    """Enumerate directory and append the new files to sources.

    Returns:
        The files that were appended.
    """
    found = enumerate_sources(sources.paths(), directory, scope, with_executables, scanner)
    sources.extend(found)
    if not quiet:
        console.print(
            f"[green]Scanner[/green] added [bold]{len(found)}[/bold] {scope.value} "
            f"sources from {directory}"
        )
    return found


def executable_source_dirs(executables: Sequence[Executable]) -> list[str]:
    """Distinct source directories of executables, in order of first appearance."""
    return list(dict.fromkeys(exe.source_dir for exe in executables))


def add_executable_sources(
    sources: SourceSet,
    executables: Sequence[Executable],
    scope: Scope,
    auto_discover: bool,
    root: Path | None = None,
    scanner: SourceScanner | None = None,
    quiet: bool = False,
) -> list[SourceFile]:
    """Fold in the directories named by executable declarations.

    Every non-program file found is kept. Program files are kept when
    auto_discover is True, or when their file name and directory match a
    declaration, in which case the declaration's name becomes the
    executable name. The first matching declaration wins.

    Args:
        sources: Set to extend.
        executables: Declarations, in manifest order.
        scope: Compilation scope for every file found.
        auto_discover: Keep undeclared programs too.
        root: Directory declaration source dirs are relative to; defaults
            to the current directory.
        scanner: Scanner passed on to enumerate_sources.
        quiet: Suppress the summary line.

    Returns:
        The files that were appended.
    """
    discovered: list[SourceFile] = []
    for source_dir in executable_source_dirs(executables):
        directory = root / source_dir if root is not None else Path(source_dir)
        known = sources.paths() | {s.path for s in discovered}
        discovered.extend(
            enumerate_sources(known, directory, scope, with_executables=True, scanner=scanner)
        )

    included: list[SourceFile] = []
    for source in discovered:
        keep = source.unit_kind is not UnitKind.PROGRAM or auto_discover

        for exe in executables:
            exe_dir = root / exe.source_dir if root is not None else Path(exe.source_dir)
            if source.path.name == exe.main and _canon(source.directory) == _canon(exe_dir):
                keep = True
                source.executable_name = exe.name
                break

        if keep:
            included.append(source)

    sources.extend(included)
    if not quiet:
        console.print(
            f"[green]Scanner[/green] added [bold]{len(included)}[/bold] {scope.value} "
            f"sources for {len(executables)} declared executables"
        )
    return included

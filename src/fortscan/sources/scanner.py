"""Source discovery: walks a directory and lists candidate source files."""

from __future__ import annotations

import os
from collections.abc import Collection, Iterable
from pathlib import Path
from typing import ClassVar

from fortscan.exceptions import SourceReadError

FORTRAN_EXTENSIONS: tuple[str, ...] = (".f90",)
C_SOURCE_EXTENSION = ".c"
C_HEADER_EXTENSION = ".h"


class SourceScanner:
    """Lists Fortran and C sources under a directory by extension.

    No file is opened here; classification by content happens in the parser.

    Usage::

        scanner = SourceScanner()
        candidates = scanner.scan(Path("src"), exclude=existing.paths())
    """

    C_EXTENSIONS: ClassVar[tuple[str, ...]] = (C_SOURCE_EXTENSION, C_HEADER_EXTENSION)

    def __init__(self, fortran_extensions: Iterable[str] = FORTRAN_EXTENSIONS) -> None:
        self._fortran_extensions = tuple(ext.lower() for ext in fortran_extensions)

    def scan(
        self,
        directory: Path,
        recurse: bool = True,
        exclude: Collection[Path] = (),
    ) -> list[Path]:
        """Return unclassified candidate files under directory.

        Directories and files are visited in lexicographic order, so the
        result is the same on every filesystem.

        Args:
            directory: Directory to walk.
            recurse: Descend into subdirectories when True.
            exclude: Paths already known to the caller; never returned.

        Returns:
            Candidate paths in discovery order.

        Raises:
            SourceReadError: If the directory cannot be listed.
        """
        if not directory.is_dir():
            raise SourceReadError(f"Source directory does not exist: {directory}")

        known = {Path(p) for p in exclude}
        results: list[Path] = []
        try:
            for dirpath_str, dirnames, filenames in os.walk(directory, topdown=True):
                dirpath = Path(dirpath_str)
                if recurse:
                    dirnames.sort()
                else:
                    dirnames[:] = []

                for fname in sorted(filenames):
                    full = dirpath / fname
                    if not self.is_source(full) or full in known:
                        continue
                    results.append(full)
        except OSError as exc:
            raise SourceReadError(f"Failed to scan directory {directory}: {exc}") from exc

        return results

    def is_source(self, path: Path) -> bool:
        return self.is_fortran(path) or self.is_c(path)

    def is_fortran(self, path: Path) -> bool:
        return path.suffix.lower() in self._fortran_extensions

    def is_c(self, path: Path) -> bool:
        return path.suffix.lower() in self.C_EXTENSIONS

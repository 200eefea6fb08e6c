"""Lexical scanners that classify a source file and extract its units.

The Fortran scanner emulates just enough of the free-form lexer to find
``module``, ``submodule``, ``program``, ``use`` and ``include`` statements
without parsing the language. The C scanner only collects quoted includes.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Final, NamedTuple

from fortscan.exceptions import ParseError, SourceReadError, TokenNotFoundError
from fortscan.model import SourceFile, UnitKind
from fortscan.sources.scanner import C_HEADER_EXTENSION
from fortscan.sources.tokenizer import split_n, split_tokens

INTRINSIC_MODULE_NAMES: Final[tuple[str, ...]] = (
    "iso_c_binding",
    "iso_fortran_env",
    "ieee_arithmetic",
    "ieee_exceptions",
    "ieee_features",
)

# `module procedure`, `module subroutine` and `module function` are
# separate module subprograms, not module definitions.
_MODULE_SUBPROGRAM_FORMS: Final[frozenset[str]] = frozenset(
    {"procedure", "subroutine", "function"}
)

_NAME_RE = re.compile(r"[a-z][a-z0-9_]*\Z", re.IGNORECASE | re.ASCII)
_QUOTES = "'\""


def validate_name(name: str) -> bool:
    """Return True if name is a valid Fortran identifier."""
    return bool(_NAME_RE.match(name))


def read_source_lines(path: Path) -> list[str]:
    """Read a source file into lines.

    Raises:
        SourceReadError: If the file cannot be read.
    """
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as exc:
        raise SourceReadError(f"Cannot read {path}: {exc}") from exc


class _Line(NamedTuple):
    """A single line under scan, with its lowered statement text."""

    file_name: str
    number: int
    raw: str
    text: str
    lowered: str

    def error(self, message: str, column: int | None = None) -> ParseError:
        return ParseError(self.file_name, message, self.number, self.raw, column)

    def column_of(self, token: str) -> int | None:
        """1-based column of token in the raw line, case-insensitively."""
        if not token:
            return None
        idx = self.raw.lower().find(token.lower())
        return idx + 1 if idx >= 0 else None


def _starts_with_keyword(lowered: str, keyword: str) -> bool:
    if not lowered.startswith(keyword):
        return False
    rest = lowered[len(keyword):]
    return not rest or not (rest[0].isalnum() or rest[0] == "_")


def _strip_comment(text: str) -> str:
    return text.split("!", 1)[0]


def _squeeze(text: str) -> str:
    return " ".join(text.split())


def _is_continued(previous: str) -> bool:
    """True if previous ends in '&' once its trailing comment is removed."""
    return _strip_comment(previous).strip().endswith("&")


class FortranParser:
    """Scans free-form Fortran sources for provided and used modules.

    Statement rules run for every line in a fixed order; the program rule
    runs last so a ``program`` statement overrides any earlier kind.
    """

    def __init__(self) -> None:
        self._rules: tuple[Callable[[SourceFile, _Line], None], ...] = (
            self._scan_use,
            self._scan_include,
            self._scan_module,
            self._scan_submodule,
            self._scan_program,
        )

    def parse_file(self, path: Path) -> SourceFile:
        """Read and scan a Fortran source file.

        Raises:
            SourceReadError: If the file cannot be read.
            ParseError: If a statement has an unrecognized shape.
        """
        return self.parse_lines(path, read_source_lines(path))

    def parse_lines(self, path: Path, lines: Sequence[str]) -> SourceFile:
        """Scan already-read lines of a Fortran source.

        Args:
            path: Path recorded on the resulting SourceFile and in errors.
            lines: File content split into lines.

        Returns:
            A SourceFile with kind, provided/used units and includes set.

        Raises:
            ParseError: If a statement has an unrecognized shape.
        """
        source = SourceFile(path=path)
        file_name = str(path)

        for idx, raw in enumerate(lines):
            if idx > 0 and _is_continued(lines[idx - 1]):
                continue
            text = raw.lstrip()
            line = _Line(file_name, idx + 1, raw, text, text.lower())
            for rule in self._rules:
                rule(source, line)

        if source.unit_kind is UnitKind.UNKNOWN:
            source.unit_kind = UnitKind.SUBPROGRAM

        source.used_units = [u for u in source.used_units if u not in source.provided_units]
        return source

    @staticmethod
    def _scan_use(source: SourceFile, line: _Line) -> None:
        if not line.lowered.startswith(("use ", "use,", "use::")):
            return

        if "::" in line.text:
            qualified = line.text.split("::", 1)[1]
            name = split_n(_squeeze(qualified), " ,", 1)
        else:
            try:
                name = split_n(_squeeze(line.text), " ,", 2)
            except TokenNotFoundError:
                # A bare "use" names nothing
                return

        name = name.lower()
        # A keyword-like prefix on an ordinary statement yields no valid name
        if not validate_name(name):
            return
        if any(intrinsic in name for intrinsic in INTRINSIC_MODULE_NAMES):
            return
        source.used_units.append(name)

    @staticmethod
    def _scan_include(source: SourceFile, line: _Line) -> None:
        if not _starts_with_keyword(line.lowered, "include"):
            return

        if len(split_tokens(line.text, _QUOTES)) < 3:
            column = next(
                (i + 1 for i, ch in enumerate(line.raw) if ch in _QUOTES),
                line.column_of("include"),
            )
            raise line.error("unable to find include file name", column)
        source.include_paths.append(split_n(line.text, _QUOTES, 2))

    @staticmethod
    def _scan_module(source: SourceFile, line: _Line) -> None:
        if not line.lowered.startswith("module "):
            return

        statement = _squeeze(_strip_comment(line.text))
        try:
            name = split_n(statement, " ", 2).lower()
        except TokenNotFoundError as exc:
            raise line.error("unable to find module name") from exc

        if name in _MODULE_SUBPROGRAM_FORMS:
            return
        if not validate_name(name):
            raise line.error("empty or invalid name for module", line.column_of(name))

        source.provided_units.append(name)
        source.unit_kind = UnitKind.MODULE

    @staticmethod
    def _scan_submodule(source: SourceFile, line: _Line) -> None:
        if not _starts_with_keyword(line.lowered, "submodule"):
            return

        statement = _strip_comment(line.text)
        try:
            name = split_n(statement, "()", 3)
        except TokenNotFoundError as exc:
            raise line.error("unable to get submodule name") from exc
        if not validate_name(name):
            raise line.error("empty or invalid name for submodule", line.column_of(name))

        try:
            ancestry = split_n(statement, "()", 2)
        except TokenNotFoundError as exc:
            raise line.error("unable to get submodule ancestry") from exc

        # (ancestor:parent) names the ancestor module and the parent submodule
        parent = ancestry.split(":", 1)[1].strip() if ":" in ancestry else ancestry
        if not validate_name(parent):
            raise line.error(
                "empty or invalid name for submodule parent", line.column_of(parent)
            )

        source.provided_units.append(name.lower())
        source.used_units.append(parent.lower())
        source.unit_kind = UnitKind.SUBMODULE

    @staticmethod
    def _scan_program(source: SourceFile, line: _Line) -> None:
        if _starts_with_keyword(line.lowered, "program"):
            source.unit_kind = UnitKind.PROGRAM


class CParser:
    """Scans C sources and headers for quoted ``#include`` directives."""

    def parse_file(self, path: Path) -> SourceFile:
        """Read and scan a C source or header.

        Raises:
            SourceReadError: If the file cannot be read.
            ParseError: If an include has no closing quote.
        """
        return self.parse_lines(path, read_source_lines(path))

    def parse_lines(self, path: Path, lines: Sequence[str]) -> SourceFile:
        kind = (
            UnitKind.C_HEADER
            if path.suffix.lower() == C_HEADER_EXTENSION
            else UnitKind.C_SOURCE
        )
        source = SourceFile(path=path, unit_kind=kind)

        for idx, raw in enumerate(lines):
            # Angle-bracket system includes carry no double quote
            if not raw.lstrip().lower().startswith("#include") or '"' not in raw:
                continue
            if raw.count('"') < 2:
                raise ParseError(
                    str(path), "unable to get c include file", idx + 1, raw, raw.find('"') + 1
                )
            source.include_paths.append(split_n(raw, '"', 2))

        return source


def parse_fortran_source(path: Path) -> SourceFile:
    """Scan one Fortran file; see FortranParser.parse_file."""
    return FortranParser().parse_file(path)


def parse_c_source(path: Path) -> SourceFile:
    """Scan one C file; see CParser.parse_file."""
    return CParser().parse_file(path)

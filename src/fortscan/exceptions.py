"""fortscan exception hierarchy.

All exceptions inherit from FortscanError so callers can catch the base
class when they want to handle any scan or resolution failure uniformly.
"""

from __future__ import annotations

from collections.abc import Sequence


class FortscanError(Exception):
    """Base exception for all fortscan errors."""


class ConfigError(FortscanError):
    """Configuration-related errors (malformed executable tables, bad values)."""


class TokenNotFoundError(FortscanError, IndexError):
    """Requested token index is outside the split result."""

    def __init__(self, index: int, count: int) -> None:
        super().__init__(f"token {index} not found ({count} tokens)")
        self.index = index
        self.count = count


class SourceReadError(FortscanError):
    """A candidate source file could not be read."""


class ParseError(FortscanError):
    """A statement in a scanned file has an unrecognized shape.

    Attributes:
        file_name: Path of the offending file.
        message: Short description of what could not be found.
        line_number: 1-based line number.
        line: Raw text of the offending line.
        column: 1-based character column, or None if not applicable.
    """

    def __init__(
        self,
        file_name: str,
        message: str,
        line_number: int,
        line: str,
        column: int | None = None,
    ) -> None:
        self.file_name = file_name
        self.message = message
        self.line_number = line_number
        self.line = line
        self.column = column
        super().__init__(self._render())

    def _render(self) -> str:
        location = f"{self.file_name}:{self.line_number}"
        if self.column is not None:
            location += f":{self.column}"
        gutter = f" {self.line_number} | "
        parts = [f"Parse error: {self.message}", location, f"{gutter}{self.line}"]
        if self.column is not None:
            parts.append(" " * (len(gutter) - 2) + "| " + " " * (self.column - 1) + "^")
        return "\n".join(parts)


class ResolutionError(FortscanError):
    """A used module has no visible provider in the source set."""

    def __init__(self, unit: str, file_name: str) -> None:
        super().__init__(
            f'Unable to find source for module dependency: "{unit}" used by "{file_name}"'
        )
        self.unit = unit
        self.file_name = file_name


class DependencyCycleError(FortscanError):
    """File dependencies form a cycle, so no build order exists."""

    def __init__(self, file_names: Sequence[str]) -> None:
        super().__init__(
            "Circular dependency detected among: " + ", ".join(sorted(file_names))
        )
        self.file_names = list(file_names)

"""Source pipeline: discovery, unit scanning, assembly and module resolution."""

from __future__ import annotations

from fortscan.sources.assembler import (
    add_executable_sources,
    add_sources_from_dir,
    enumerate_sources,
)
from fortscan.sources.parser import (
    CParser,
    FortranParser,
    parse_c_source,
    parse_fortran_source,
    validate_name,
)
from fortscan.sources.resolver import build_order, resolve_module_dependencies
from fortscan.sources.scanner import SourceScanner
from fortscan.sources.tokenizer import split_n

__all__ = [
    "CParser",
    "FortranParser",
    "SourceScanner",
    "add_executable_sources",
    "add_sources_from_dir",
    "build_order",
    "enumerate_sources",
    "parse_c_source",
    "parse_fortran_source",
    "resolve_module_dependencies",
    "split_n",
    "validate_name",
]

"""fortscan — source discovery and module dependency resolution for Fortran projects."""

from __future__ import annotations

__version__ = "0.1.0"

"""Shared test fixtures."""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

WriteFile = Callable[[str, str], Path]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's global config and FORTSCAN_* variables out of tests."""
    fake_home = tmp_path_factory.mktemp("home")
    monkeypatch.setattr("fortscan.config._GLOBAL_CONFIG_PATH", fake_home / "config.toml")
    for var in (
        "FORTSCAN_LOG_LEVEL",
        "FORTSCAN_LIBRARY_DIR",
        "FORTSCAN_AUTO_EXECUTABLES",
        "FORTSCAN_AUTO_TESTS",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def write_file(tmp_path: Path) -> WriteFile:
    """Write dedented text to a path relative to tmp_path."""

    def _write(rel: str, content: str) -> Path:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fpm_project(tmp_path: Path, write_file: WriteFile) -> Path:
    """A small project with library, app and test sources."""
    write_file(
        "src/greet.f90",
        """
        module greet
          implicit none
        contains
          subroutine hello()
            print *, "hello"
          end subroutine hello
        end module greet
        """,
    )
    write_file(
        "app/main.f90",
        """
        program main
          use greet, only: hello
          call hello()
        end program main
        """,
    )
    write_file(
        "test/main.f90",
        """
        program check
          use greet
          use test_helpers
          call hello()
        end program check
        """,
    )
    write_file(
        "test/test_helpers.f90",
        """
        module test_helpers
          implicit none
        end module test_helpers
        """,
    )
    return tmp_path

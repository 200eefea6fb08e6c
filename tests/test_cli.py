"""Tests for the CLI commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from fortscan.cli import app

runner = CliRunner()


class TestScan:
    def test_scan_builds_snapshot(self, fpm_project: Path) -> None:
        result = runner.invoke(app, ["scan", str(fpm_project)])
        assert result.exit_code == 0
        assert (fpm_project / ".fortscan" / "sources.json").is_file()
        assert "4 source files" in result.output

    def test_scan_current_directory(
        self, fpm_project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(fpm_project)
        result = runner.invoke(app, ["scan", "--verbose"])
        assert result.exit_code == 0

    def test_scan_parse_error(self, fpm_project: Path) -> None:
        (fpm_project / "src" / "bad.f90").write_text("module 2bad\n", encoding="utf-8")
        result = runner.invoke(app, ["scan", str(fpm_project)])
        assert result.exit_code == 1
        assert "parse error" in result.output.lower()

    def test_scan_unresolved_module(self, fpm_project: Path) -> None:
        (fpm_project / "app" / "main.f90").write_text(
            "program main\n  use missing\nend program main\n", encoding="utf-8"
        )
        result = runner.invoke(app, ["scan", str(fpm_project)])
        assert result.exit_code == 1
        assert "unable to find source" in result.output.lower()

    def test_scan_missing_project(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["scan", str(tmp_path / "nope")])
        assert result.exit_code == 1

    def test_scan_bad_config(self, fpm_project: Path) -> None:
        (fpm_project / ".fortscan").mkdir()
        (fpm_project / ".fortscan" / "config.toml").write_text(
            "[[executable]]\nmain = 'x.f90'\n", encoding="utf-8"
        )
        result = runner.invoke(app, ["scan", str(fpm_project)])
        assert result.exit_code == 1


class TestOrder:
    def test_order_lists_entry_points(self, fpm_project: Path) -> None:
        result = runner.invoke(app, ["order", str(fpm_project)])
        assert result.exit_code == 0
        assert "runTests" in result.output
        assert result.output.index("greet.f90") < result.output.index("app/main.f90")
        assert not (fpm_project / ".fortscan" / "sources.json").exists()

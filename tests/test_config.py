"""Tests for layered configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from fortscan.config import (
    ScanConfig,
    default_executables,
    default_tests,
    load_config,
)
from fortscan.exceptions import ConfigError


def write_project_config(project: Path, text: str) -> None:
    config_dir = project / ".fortscan"
    config_dir.mkdir(exist_ok=True)
    (config_dir / "config.toml").write_text(text, encoding="utf-8")


class TestLoadConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)

        assert config.name == tmp_path.name
        assert config.library_dir == "src"
        assert config.app_dir == "app"
        assert config.test_dir == "test"
        assert config.auto_executables is True
        assert config.executables == []
        assert config.fortran_extensions == [".f90"]

    def test_project_config(self, tmp_path: Path) -> None:
        write_project_config(
            tmp_path,
            'name = "demo"\n'
            'library_dir = "lib"\n'
            'dependency_dirs = ["deps/json/src"]\n'
            "auto_executables = false\n"
            'log_level = "debug"\n'
            "\n"
            "[[executable]]\n"
            'name = "demo-cli"\n'
            'source-dir = "cli"\n'
            'main = "driver.f90"\n'
            "\n"
            "[[test]]\n"
            'name = "unit"\n',
        )

        config = load_config(tmp_path)

        assert config.name == "demo"
        assert config.library_dir == "lib"
        assert config.dependency_dirs == ["deps/json/src"]
        assert config.auto_executables is False
        assert config.log_level == "DEBUG"
        assert len(config.executables) == 1
        exe = config.executables[0]
        assert (exe.name, exe.source_dir, exe.main) == ("demo-cli", "cli", "driver.f90")
        assert config.tests[0].source_dir == "test"
        assert config.tests[0].main == "main.f90"

    def test_global_config_is_lowest(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        global_path = tmp_path / "global.toml"
        global_path.write_text('library_dir = "global_src"\nlog_level = "WARNING"\n', encoding="utf-8")
        monkeypatch.setattr("fortscan.config._GLOBAL_CONFIG_PATH", global_path)
        write_project_config(tmp_path, 'library_dir = "project_src"\n')

        config = load_config(tmp_path)

        assert config.library_dir == "project_src"
        assert config.log_level == "WARNING"

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        write_project_config(tmp_path, "auto_tests = true\n")
        monkeypatch.setenv("FORTSCAN_AUTO_TESTS", "no")
        monkeypatch.setenv("FORTSCAN_LOG_LEVEL", "debug")
        monkeypatch.setenv("FORTSCAN_LIBRARY_DIR", "source")

        config = load_config(tmp_path)

        assert config.auto_tests is False
        assert config.log_level == "DEBUG"
        assert config.library_dir == "source"

    def test_invalid_toml_is_ignored(self, tmp_path: Path) -> None:
        write_project_config(tmp_path, "name = [unterminated\n")

        config = load_config(tmp_path)

        assert config.name == tmp_path.name

    def test_executable_without_name(self, tmp_path: Path) -> None:
        write_project_config(tmp_path, '[[executable]]\nmain = "main.f90"\n')

        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_executable_dependencies_must_be_table(self, tmp_path: Path) -> None:
        write_project_config(tmp_path, '[[executable]]\nname = "cli"\ndependencies = "json"\n')

        with pytest.raises(ConfigError, match="dependencies"):
            load_config(tmp_path)

    def test_dependency_dirs_must_be_array(self, tmp_path: Path) -> None:
        write_project_config(tmp_path, 'dependency_dirs = "deps/json/src"\n')

        with pytest.raises(ConfigError, match="dependency_dirs"):
            load_config(tmp_path)

    def test_fortran_extensions_must_be_array(self, tmp_path: Path) -> None:
        write_project_config(tmp_path, 'fortran_extensions = ".f90"\n')

        with pytest.raises(ConfigError, match="fortran_extensions"):
            load_config(tmp_path)


class TestDefaultExecutables:
    def test_default_app_main(self, tmp_path: Path) -> None:
        (tmp_path / "app").mkdir()
        (tmp_path / "app" / "main.f90").write_text("program main\nend program\n", encoding="utf-8")
        config = ScanConfig(project_dir=tmp_path, name="demo")

        exes = default_executables(config)

        assert [(e.name, e.source_dir, e.main) for e in exes] == [("demo", "app", "main.f90")]

    def test_default_test_main(self, tmp_path: Path) -> None:
        (tmp_path / "test").mkdir()
        (tmp_path / "test" / "main.f90").write_text("program t\nend program\n", encoding="utf-8")
        config = ScanConfig(project_dir=tmp_path)

        assert [e.name for e in default_tests(config)] == ["runTests"]

    def test_no_default_without_main(self, tmp_path: Path) -> None:
        (tmp_path / "app").mkdir()
        config = ScanConfig(project_dir=tmp_path)

        assert default_executables(config) == []
        assert default_tests(config) == []

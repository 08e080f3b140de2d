"""Tests for the modlock CLI commands."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from modlock.lock import LOCKFILE_NAME
from modlock.lock import Lockfile
from modlock.main import cli
from modlock.manifest import MANIFEST_FILE_NAME
from modlock.resolution import StaticResolver

MANIFEST = """
[module]
name = "app"
version = "0.1.0"
module = "app.wasm"

[[command]]
name = "app-run"

[dependencies]
foo = "1.2.0"
"""


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    for key in ("MODLOCK_REGISTRY_URL", "MODLOCK_CACHE_DIR", "MODLOCK_MAX_WORKERS", "MODLOCK_LOG_PATH"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def project(tmp_path):
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    (project_dir / MANIFEST_FILE_NAME).write_text(MANIFEST, encoding="utf-8")
    return project_dir


@pytest.fixture
def static_resolver(make_dependency):
    resolver = StaticResolver()
    resolver.add("1.2.0", make_dependency("foo", "1.2.0", commands=("foo-run",), download_url="https://x/foo.tgz"))
    return resolver


def _lock(project_dir, resolver, *args):
    runner = CliRunner()
    with patch("modlock.commands.lock.create_resolver", return_value=resolver):
        return runner.invoke(cli, ["lock", str(project_dir), *args])


class TestLockCommand:
    def test_creates_lockfile(self, project, static_resolver):
        result = _lock(project, static_resolver)

        assert result.exit_code == 0, result.output
        assert "Wrote" in result.output
        lockfile = Lockfile.open(project)
        assert list(lockfile.modules) == ["foo 1.2.0"]
        assert lockfile.get_command("app-run").module == "app 0.1.0"
        assert lockfile.get_command("foo-run").module == "foo 1.2.0"

    def test_second_run_uses_lockfile(self, project, static_resolver, exploding_resolver):
        _lock(project, static_resolver, "--quiet")
        before = (project / LOCKFILE_NAME).read_bytes()

        result = _lock(project, exploding_resolver, "--quiet")

        assert result.exit_code == 0, result.output
        assert exploding_resolver.calls == []
        assert (project / LOCKFILE_NAME).read_bytes() == before

    def test_resolution_failure_aborts(self, project):
        result = _lock(project, StaticResolver())

        assert result.exit_code == 1
        assert "Lock failed" in result.output
        assert not (project / LOCKFILE_NAME).exists()

    def test_missing_manifest(self, tmp_path, static_resolver):
        result = _lock(tmp_path, static_resolver)

        assert result.exit_code == 1
        assert MANIFEST_FILE_NAME in result.output

    def test_strict_rejects_dangling_lockfile(self, project, static_resolver):
        (project / LOCKFILE_NAME).write_text("modules: {}\ncommands:\n  ghost:\n    module: gone 1.0.0\n")

        result = _lock(project, static_resolver, "--strict")

        assert result.exit_code == 1
        assert "ghost" in result.output

    def test_strict_accepts_own_root_commands(self, project, static_resolver):
        _lock(project, static_resolver, "--quiet")

        result = _lock(project, static_resolver, "--strict", "--quiet")

        assert result.exit_code == 0, result.output

    def test_rejects_zero_workers(self, project, static_resolver):
        result = _lock(project, static_resolver, "--workers", "0")

        assert result.exit_code == 2


class TestShowCommands:
    @pytest.fixture
    def locked_project(self, project, static_resolver):
        _lock(project, static_resolver, "--quiet")
        return project

    def test_show_module_json(self, locked_project):
        result = CliRunner().invoke(cli, ["show", "module", "foo 1.2.0", "-C", str(locked_project), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["source"] == "registry+foo"
        assert data["resolved"] == "https://x/foo.tgz"

    def test_show_module_panel(self, locked_project):
        result = CliRunner().invoke(cli, ["show", "module", "foo 1.2.0", "-C", str(locked_project)])

        assert result.exit_code == 0, result.output
        assert "registry+foo" in result.output

    def test_show_module_not_found(self, locked_project):
        result = CliRunner().invoke(cli, ["show", "module", "foo 9.9.9", "-C", str(locked_project)])

        assert result.exit_code == 1
        assert "Module not found: foo 9.9.9" in result.output

    def test_show_command_json(self, locked_project):
        result = CliRunner().invoke(cli, ["show", "command", "foo-run", "-C", str(locked_project), "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"name": "foo-run", "module": "foo 1.2.0"}

    def test_show_command_not_found(self, locked_project):
        result = CliRunner().invoke(cli, ["show", "command", "nope", "-C", str(locked_project)])

        assert result.exit_code == 1
        assert "Command not found: nope" in result.output

    def test_show_without_lockfile(self, project):
        result = CliRunner().invoke(cli, ["show", "command", "app-run", "-C", str(project)])

        assert result.exit_code == 1
        assert "Cannot read" in result.output


class TestCheckCommand:
    def test_consistent(self, project, static_resolver):
        _lock(project, static_resolver, "--quiet")

        result = CliRunner().invoke(cli, ["check", str(project)])

        assert result.exit_code == 0, result.output
        assert "consistent" in result.output

    def test_dangling(self, project):
        (project / LOCKFILE_NAME).write_text("modules: {}\ncommands:\n  ghost:\n    module: gone 1.0.0\n")

        result = CliRunner().invoke(cli, ["check", str(project)])

        assert result.exit_code == 1
        assert "ghost -> gone 1.0.0" in result.output


def test_version():
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "modlock" in result.output

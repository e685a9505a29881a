"""
Tests for CLI commands — global options and the runtime commands.

Commands get the test's RuntimeManager through ``obj={"manager": ...}``.
"""

import json
import logging
import sys

import pytest
from click.testing import CliRunner

from rtswitch.core.services.runtimes.data.constants import NODE_INDEX_URL
from rtswitch.main import cli

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX symlinks")


@pytest.fixture(autouse=True)
def _restore_logging():
    """``cli`` reconfigures the root logger on every invocation."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def invoke(manager):
    runner = CliRunner()

    def run(*args, input=None):  # noqa: A002
        return runner.invoke(cli, list(args), obj={"manager": manager}, input=input)

    return run


@pytest.fixture
def node_catalog(upstream, archives):
    upstream.json[NODE_INDEX_URL] = [
        {"version": "v21.6.0", "files": ["linux-x64"], "lts": False},
        {"version": "v20.11.0", "files": ["linux-x64"], "lts": "Iron"},
        {"version": "v18.19.0", "files": ["linux-x64"], "lts": "Hydrogen"},
    ]
    for version in ("v21.6.0", "v20.11.0", "v18.19.0"):
        upstream.serve_node(archives, version)


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Node.js, Python and Java" in result.output
        for command in ("available", "installed", "install", "use", "remove", "purge", "exec"):
            assert command in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_unknown_kind_rejected(self, invoke):
        result = invoke("installed", "ruby")
        assert result.exit_code == 2
        assert "ruby" in result.output

    def test_missing_config_file(self, tmp_path):
        result = CliRunner().invoke(cli, ["--config", str(tmp_path / "nope.yml"), "installed", "node"])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestAvailable:
    def test_text(self, invoke, node_catalog):
        result = invoke("available", "node")
        assert result.exit_code == 0
        assert "Node.js releases (3)" in result.output
        assert "(LTS Iron)" in result.output

    def test_json_with_limit(self, invoke, node_catalog):
        result = invoke("available", "node", "--json", "--limit", "2")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [r["version"] for r in data] == ["v21.6.0", "v20.11.0"]
        assert data[1]["lts"] == "Iron"
        assert "downloadUrl" in data[0]

    def test_catalog_failure_json(self, invoke):
        result = invoke("--quiet", "available", "node", "--json")
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["ok"] is False
        assert data["code"] == "catalog-unavailable"


@posix_only
class TestInstallAndUse:
    def test_install(self, invoke, node_catalog):
        result = invoke("install", "node", "20.11.0")
        assert result.exit_code == 0, result.output
        assert "Installed Node.js v20.11.0" in result.output

        again = invoke("install", "node", "20.11.0", "--json")
        assert json.loads(again.output)["status"] == "already-present"

    def test_install_and_use_json(self, invoke, node_catalog, env_store):
        result = invoke("install", "node", "v18.19.0", "--use", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["status"] == "installed"
        assert data["activation"]["version"] == "v18.19.0"
        assert data["activation"]["restart_required"] is True
        assert env_store.values["PATH"].startswith(data["activation"]["path_entries"][0])

    def test_install_unknown_version(self, invoke, node_catalog):
        result = invoke("install", "node", "v99.0.0")
        assert result.exit_code == 1
        assert "v99.0.0" in result.output

    def test_use_and_installed(self, invoke, node_catalog):
        invoke("install", "node", "v20.11.0")
        invoke("install", "node", "v18.19.0")

        used = invoke("use", "node", "v20.11.0")
        assert used.exit_code == 0
        assert "v20.11.0 is now the active version" in used.output

        listing = invoke("installed", "node", "--json")
        assert json.loads(listing.output) == {
            "installed": ["v20.11.0", "v18.19.0"], "current": "v20.11.0",
        }
        text = invoke("installed", "node")
        assert "→ v20.11.0 (active)" in text.output

    def test_use_not_installed(self, invoke):
        result = invoke("use", "node", "v20.11.0", "--json")
        assert result.exit_code == 1
        assert json.loads(result.output)["code"] == "not-found"

    def test_verbose_shows_path_entries(self, manager, node_catalog):
        CliRunner().invoke(cli, ["install", "node", "v20.11.0"], obj={"manager": manager})
        result = CliRunner().invoke(
            cli, ["--verbose", "use", "node", "v20.11.0"], obj={"manager": manager},
        )
        assert "PATH += " in result.output


@posix_only
class TestRemoveAndPurge:
    def test_remove_requires_confirmation(self, invoke, node_catalog, manager):
        invoke("install", "node", "v20.11.0")
        result = invoke("remove", "node", "v20.11.0", input="n\n")
        assert result.exit_code == 1
        assert manager.list_installed("node").installed == ["v20.11.0"]

        confirmed = invoke("remove", "node", "v20.11.0", input="y\n")
        assert confirmed.exit_code == 0
        assert manager.list_installed("node").installed == []

    def test_remove_active_is_refused(self, invoke, node_catalog):
        invoke("install", "node", "v20.11.0", "--use")
        result = invoke("remove", "node", "v20.11.0", "--yes", "--json")
        assert result.exit_code == 1
        assert json.loads(result.output)["code"] == "active-version-undeletable"

    def test_purge(self, invoke, node_catalog, manager):
        invoke("install", "node", "v20.11.0", "--use")
        invoke("install", "node", "v18.19.0")
        result = invoke("purge", "node", "--yes", "--json")
        assert result.exit_code == 0
        assert sorted(json.loads(result.output)["removed"]) == ["v18.19.0", "v20.11.0"]
        assert manager.list_installed("node").current is None


class TestCheckAndExec:
    def test_check_json(self, invoke, monkeypatch):
        from rtswitch.core.services.runtimes.detection import accessibility

        monkeypatch.setattr(accessibility, "_run_version_command", lambda cmd: None)
        result = invoke("check", "java", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["accessible"] is False
        assert data["kind"] == "java"

    def test_exec_without_active_version(self, invoke):
        result = invoke("exec", "node", "node", "--version")
        assert result.exit_code == 1
        assert "No active Node.js version" in result.output

    @posix_only
    def test_exec_passes_exit_code(self, invoke, node_catalog, manager, monkeypatch):
        invoke("install", "node", "v20.11.0", "--use")
        calls = []

        def fake_run(kind, argv, *, capture=True):
            calls.append((kind, argv, capture))
            from rtswitch.core.models.runtime import RunResult

            return RunResult(kind=kind, command=argv, returncode=3)

        monkeypatch.setattr(manager, "run", fake_run)
        result = invoke("exec", "node", "npm", "--version")
        assert result.exit_code == 3
        assert calls == [("node", ["npm", "--version"], False)]

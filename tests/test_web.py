"""
Tests for the web API — app factory, runtime routes, error mapping.
"""

from __future__ import annotations

import sys

import pytest
from flask.testing import FlaskClient

from rtswitch.core.errors import NetworkError
from rtswitch.core.services.runtimes.data.constants import NODE_INDEX_URL
from rtswitch.ui.web.server import create_app

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX symlinks")


@pytest.fixture()
def client(manager) -> FlaskClient:
    app = create_app(manager)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture()
def node_catalog(upstream, archives):
    upstream.json[NODE_INDEX_URL] = [
        {"version": "v20.11.0", "files": ["linux-x64"], "lts": "Iron"},
        {"version": "v18.19.0", "files": ["linux-x64"], "lts": "Hydrogen"},
    ]
    return {v: upstream.serve_node(archives, v) for v in ("v20.11.0", "v18.19.0")}


class TestAppFactory:
    def test_manager_attached(self, manager):
        app = create_app(manager)
        assert app.config["RUNTIME_MANAGER"] is manager

    def test_unknown_route_is_json_404(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.get_json()["ok"] is False

    def test_wrong_method_is_json_405(self, client):
        resp = client.get("/api/runtimes/node/purge")
        assert resp.status_code == 405
        assert resp.get_json()["code"] == "method-not-allowed"


class TestObserve:
    def test_kinds(self, client):
        data = client.get("/api/runtimes").get_json()
        assert [k["kind"] for k in data] == ["node", "python", "java"]
        assert data[0]["name"] == "Node.js"

    def test_available(self, client, node_catalog):
        resp = client.get("/api/runtimes/node/available")
        assert resp.status_code == 200
        data = resp.get_json()
        assert [r["version"] for r in data] == ["v20.11.0", "v18.19.0"]
        assert list(data[0]) == ["version", "downloadUrl", "fileName", "lts"]

    def test_catalog_unavailable_is_502(self, client, upstream):
        upstream.json[NODE_INDEX_URL] = NetworkError("boom", url=NODE_INDEX_URL)
        resp = client.get("/api/runtimes/node/available")
        assert resp.status_code == 502
        assert resp.get_json()["code"] == "catalog-unavailable"

    def test_unknown_kind_is_404(self, client):
        resp = client.get("/api/runtimes/ruby/installed")
        assert resp.status_code == 404
        assert resp.get_json()["code"] == "unknown-kind"

    def test_installed_empty(self, client):
        assert client.get("/api/runtimes/python/installed").get_json() == {
            "installed": [], "current": None,
        }

    def test_check(self, client, monkeypatch):
        from rtswitch.core.services.runtimes.detection import accessibility

        monkeypatch.setattr(accessibility, "_run_version_command", lambda cmd: "v20.11.0")
        data = client.get("/api/runtimes/node/check").get_json()
        assert data["accessible"] is True
        assert data["source"] == "path"


@posix_only
class TestAct:
    def test_install_by_version(self, client, node_catalog):
        resp = client.post("/api/runtimes/node/install", json={"version": "20.11.0"})
        assert resp.status_code == 201
        assert resp.get_json()["status"] == "installed"

        again = client.post("/api/runtimes/node/install", json={"version": "20.11.0"})
        assert again.status_code == 200
        assert again.get_json()["status"] == "already-present"

    def test_install_full_release_and_use(self, client, node_catalog, upstream):
        release = node_catalog["v18.19.0"].to_dict()
        resp = client.post("/api/runtimes/node/install", json={**release, "use": True})
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["activation"]["version"] == "v18.19.0"
        assert NODE_INDEX_URL not in upstream.requests

    def test_install_missing_version(self, client):
        resp = client.post("/api/runtimes/node/install", json={})
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "bad-request"

    def test_install_invalid_release(self, client):
        resp = client.post("/api/runtimes/node/install", json={"version": "v1.0.0", "fileName": "x"})
        assert resp.status_code == 400

    def test_install_rejects_path_in_file_name(self, client, node_catalog, upstream, tmp_path):
        victim = tmp_path / "victim.txt"
        victim.write_text("keep me")
        release = node_catalog["v18.19.0"].to_dict()

        for name in (str(victim), "../../victim.txt"):
            resp = client.post("/api/runtimes/node/install", json={**release, "fileName": name})
            assert resp.status_code == 400
            assert "bare file name" in resp.get_json()["error"]
        assert victim.read_text() == "keep me"
        assert release["downloadUrl"] not in upstream.requests

    def test_install_rejects_invalid_version(self, client, manager):
        resp = client.post("/api/runtimes/python/install", json={
            "version": "3.12",
            "downloadUrl": "https://example.test/Python-3.12.tgz",
            "fileName": "Python-3.12.tgz",
        })
        assert resp.status_code == 400
        assert "3.12" in resp.get_json()["error"]
        assert not manager.kind_dir("python").exists()

    def test_install_unknown_version(self, client, node_catalog):
        resp = client.post("/api/runtimes/node/install", json={"version": "v99.0.0"})
        assert resp.status_code == 404
        assert resp.get_json()["code"] == "release-not-found"

    def test_use_and_delete_guard(self, client, node_catalog):
        client.post("/api/runtimes/node/install", json={"version": "v20.11.0"})
        client.post("/api/runtimes/node/install", json={"version": "v18.19.0"})

        used = client.post("/api/runtimes/node/use", json={"version": "v20.11.0"})
        assert used.status_code == 200
        assert used.get_json()["restart_required"] is True

        refused = client.delete("/api/runtimes/node/versions/v20.11.0")
        assert refused.status_code == 409
        assert refused.get_json()["code"] == "active-version-undeletable"

        deleted = client.delete("/api/runtimes/node/versions/v18.19.0")
        assert deleted.status_code == 200
        assert client.get("/api/runtimes/node/installed").get_json() == {
            "installed": ["v20.11.0"], "current": "v20.11.0",
        }

    def test_use_not_installed(self, client):
        resp = client.post("/api/runtimes/node/use", json={"version": "v20.11.0"})
        assert resp.status_code == 404
        assert resp.get_json()["version"] == "v20.11.0"

    def test_use_incomplete(self, client, manager):
        (manager.kind_dir("node") / "v20.11.0").mkdir(parents=True)
        resp = client.post("/api/runtimes/node/use", json={"version": "v20.11.0"})
        assert resp.status_code == 409

    def test_delete_missing(self, client):
        resp = client.delete("/api/runtimes/java/versions/21.0.2+13")
        assert resp.status_code == 404

    def test_purge(self, client, node_catalog):
        client.post("/api/runtimes/node/install", json={"version": "v20.11.0", "use": True})
        resp = client.post("/api/runtimes/node/purge")
        assert resp.status_code == 200
        assert resp.get_json()["removed"] == ["v20.11.0"]

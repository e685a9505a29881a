"""
Shared test fixtures — temp roots, archive builders, a fake upstream.
"""

from __future__ import annotations

import io
import shutil
import tarfile
import threading
import zipfile
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

from rtswitch.core.config.loader import Settings
from rtswitch.core.errors import NetworkError
from rtswitch.core.models.runtime import HostInfo, Release
from rtswitch.core.persistence.environment_store import MemoryEnvironmentStore
from rtswitch.core.services.runtimes.orchestration.manager import RuntimeManager

FAKE_NODE = '#!/bin/sh\necho "fake-node $@"\n'


# ── Archive builders ────────────────────────────────────────────


def make_tar_gz(path: Path, members: dict[str, str | bytes | None]) -> Path:
    """Write a .tar.gz; a ``None`` value makes a directory entry."""
    with tarfile.open(path, "w:gz") as tf:
        for name, content in members.items():
            info = tarfile.TarInfo(name)
            if content is None:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tf.addfile(info)
                continue
            data = content.encode() if isinstance(content, str) else content
            info.size = len(data)
            info.mode = 0o755
            tf.addfile(info, io.BytesIO(data))
    return path


def make_zip(path: Path, members: dict[str, str | bytes]) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return path


def node_archive(directory: Path, version: str) -> Path:
    """A linux-x64 Node.js tarball with a runnable fake ``bin/node``."""
    stem = f"node-{version}-linux-x64"
    return make_tar_gz(directory / f"{stem}.tar.gz", {
        f"{stem}/bin/node": FAKE_NODE,
        f"{stem}/README.md": f"Node.js {version}\n",
    })


def node_release(version: str) -> Release:
    stem = f"node-{version}-linux-x64"
    return Release(
        version=version,
        download_url=f"https://nodejs.org/dist/{version}/{stem}.tar.gz",
        file_name=f"{stem}.tar.gz",
        archive_root=stem,
    )


# ── Fake upstream ───────────────────────────────────────────────


class FakeUpstream:
    """In-memory stand-in for the catalog fetcher and the downloader."""

    def __init__(self):
        self.json: dict[str, object] = {}
        self.files: dict[str, Path] = {}
        self.requests: list[str] = []

    def fetch_json(self, url: str):
        self.requests.append(url)
        if url not in self.json:
            raise NetworkError(f"HTTP 404 fetching {url}", url=url, status=404)
        value = self.json[url]
        if isinstance(value, Exception):
            raise value
        return value

    def download(self, url: str, dest: Path) -> Path:
        self.requests.append(url)
        src = self.files.get(url)
        if src is None:
            raise NetworkError(f"HTTP 404 fetching {url}", url=url, status=404)
        shutil.copyfile(src, dest)
        return dest

    def serve_node(self, directory: Path, version: str) -> Release:
        release = node_release(version)
        self.files[release.download_url] = node_archive(directory, version)
        return release


# ── Core fixtures ───────────────────────────────────────────────


@pytest.fixture
def linux_host() -> HostInfo:
    return HostInfo(os="linux", arch="x64")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(root=tmp_path / "root", timeout=5)


@pytest.fixture
def env_store() -> MemoryEnvironmentStore:
    return MemoryEnvironmentStore({"PATH": "/usr/local/bin:/usr/bin:/bin"}, separator=":")


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def archives(tmp_path: Path) -> Path:
    d = tmp_path / "archives"
    d.mkdir()
    return d


@pytest.fixture
def manager(settings, linux_host, env_store, upstream) -> RuntimeManager:
    return RuntimeManager(
        settings,
        host=linux_host,
        env_store=env_store,
        fetch_json=upstream.fetch_json,
        downloader=upstream.download,
    )


# ── Local HTTP server ───────────────────────────────────────────


class _Routes:
    def __init__(self):
        self.bodies: dict[str, tuple[int, bytes, dict[str, str]]] = {}

    def add(self, path: str, body: bytes | str, status: int = 200, **headers: str) -> None:
        data = body.encode() if isinstance(body, str) else body
        self.bodies[path] = (status, data, headers)

    def redirect(self, path: str, location: str, status: int = 302) -> None:
        self.bodies[path] = (status, b"", {"Location": location})


@pytest.fixture
def http_server():
    """Threaded HTTP server; yields ``(base_url, routes)``."""
    routes = _Routes()

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):  # noqa: N802
            status, body, headers = routes.bodies.get(self.path, (404, b"not found", {}))
            self.send_response(status)
            for key, value in headers.items():
                self.send_header(key, value)
            if "Content-Length" not in headers:
                self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):  # noqa: A002
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}", routes
    finally:
        server.shutdown()
        server.server_close()

"""
Tests for the ``current`` pointer (POSIX symlinks).
"""

import os
import sys

import pytest

from rtswitch.core.services.runtimes.execution import pointer

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX symlinks")


@pytest.fixture
def kind_dir(tmp_path):
    d = tmp_path / "node_versions"
    (d / "v18.19.0").mkdir(parents=True)
    (d / "v20.11.0").mkdir()
    return d


class TestPointTo:
    def test_creates_pointer(self, kind_dir):
        current = kind_dir / "current"
        pointer.point_to(current, kind_dir / "v20.11.0")
        assert current.is_symlink()
        assert pointer.resolve(current) == (kind_dir / "v20.11.0").resolve()

    def test_switch_leaves_exactly_one_pointer(self, kind_dir):
        current = kind_dir / "current"
        pointer.point_to(current, kind_dir / "v20.11.0")
        pointer.point_to(current, kind_dir / "v18.19.0")
        links = [p.name for p in kind_dir.iterdir() if p.is_symlink()]
        assert links == ["current"]
        assert pointer.resolve(current).name == "v18.19.0"

    def test_stale_staging_link_is_replaced(self, kind_dir):
        stale = kind_dir / f".current.tmp-{os.getpid()}"
        os.symlink(kind_dir / "v18.19.0", stale)
        pointer.point_to(kind_dir / "current", kind_dir / "v20.11.0")
        assert not stale.exists() and not stale.is_symlink()

    def test_real_directory_is_not_replaced(self, kind_dir):
        (kind_dir / "current").mkdir()
        with pytest.raises(IsADirectoryError):
            pointer.point_to(kind_dir / "current", kind_dir / "v20.11.0")
        assert (kind_dir / "current").is_dir()


class TestReadAndResolve:
    def test_no_pointer(self, kind_dir):
        assert pointer.read_target(kind_dir / "current") is None
        assert pointer.resolve(kind_dir / "current") is None
        assert not pointer.is_pointer(kind_dir / "current")

    def test_relative_target_is_absolutized(self, kind_dir):
        os.symlink("v18.19.0", kind_dir / "current")
        assert pointer.read_target(kind_dir / "current") == kind_dir / "v18.19.0"

    def test_dangling_pointer(self, kind_dir):
        pointer.point_to(kind_dir / "current", kind_dir / "v20.11.0")
        (kind_dir / "v20.11.0").rmdir()
        assert pointer.is_pointer(kind_dir / "current")
        assert pointer.read_target(kind_dir / "current") is not None
        assert pointer.resolve(kind_dir / "current") is None


class TestRemove:
    def test_removes_link_not_target(self, kind_dir):
        pointer.point_to(kind_dir / "current", kind_dir / "v20.11.0")
        assert pointer.remove(kind_dir / "current") is True
        assert not (kind_dir / "current").is_symlink()
        assert (kind_dir / "v20.11.0").is_dir()

    def test_nothing_to_remove(self, kind_dir):
        assert pointer.remove(kind_dir / "current") is False
        assert pointer.remove(kind_dir / "v20.11.0") is False
        assert (kind_dir / "v20.11.0").is_dir()

"""
Tests for PATH rewriting.
"""

import pytest

from rtswitch.core.services.runtimes.domain.path_entries import is_managed_entry, rewrite_path

ROOT = "/home/u/.rtswitch/node_versions"
CURRENT_BIN = f"{ROOT}/current/bin"


class TestRewritePath:
    def test_prepends_current(self):
        assert rewrite_path("/usr/bin:/bin", [CURRENT_BIN], managed_root=ROOT) == (
            f"{CURRENT_BIN}:/usr/bin:/bin"
        )

    def test_idempotent(self):
        once = rewrite_path("/usr/bin", [CURRENT_BIN], managed_root=ROOT)
        assert rewrite_path(once, [CURRENT_BIN], managed_root=ROOT) == once

    def test_strips_version_dirs_and_keeps_order(self):
        value = f"/a:{ROOT}/v18.0.0/bin:/b:{ROOT}/current/bin/:/c"
        assert rewrite_path(value, [CURRENT_BIN], managed_root=ROOT) == f"{CURRENT_BIN}:/a:/b:/c"

    def test_drops_empty_segments(self):
        assert rewrite_path("::/usr/bin: :", [CURRENT_BIN], managed_root=ROOT) == (
            f"{CURRENT_BIN}:/usr/bin"
        )

    def test_empty_path(self):
        assert rewrite_path("", [CURRENT_BIN], managed_root=ROOT) == CURRENT_BIN

    def test_multiple_entries_in_order(self):
        win_root = r"C:\Users\u\.rtswitch\python_versions"
        entries = [rf"{win_root}\current", rf"{win_root}\current\Scripts"]
        value = rf"C:\WINDOWS;{win_root.upper()}\3.11.0;C:\Tools"
        assert rewrite_path(
            value, entries, managed_root=win_root, separator=";", case_insensitive=True,
        ) == ";".join([*entries, r"C:\WINDOWS", r"C:\Tools"])

    def test_markers_strip_foreign_jdks(self):
        value = "/usr/lib/jvm/JDK-17/bin:/opt/jre8/bin:/usr/bin"
        result = rewrite_path(
            value, ["/r/java_versions/current/bin"],
            managed_root="/r/java_versions", markers=("java", "jdk", "jre"),
        )
        assert result == "/r/java_versions/current/bin:/usr/bin"

    def test_markers_ignore_other_kinds_under_shared_root(self):
        shared = "/home/jrenner/.rtswitch"
        value = f"{shared}/node_versions/current/bin:{shared}/python_versions/current/bin:/opt/jdk-17/bin"
        result = rewrite_path(
            value, [f"{shared}/java_versions/current/bin"],
            managed_root=f"{shared}/java_versions", markers=("java", "jdk", "jre"),
            shared_root=shared,
        )
        assert result.split(":") == [
            f"{shared}/java_versions/current/bin",
            f"{shared}/node_versions/current/bin",
            f"{shared}/python_versions/current/bin",
        ]

    def test_shared_root_prefix_must_end_at_separator(self):
        assert is_managed_entry(
            "/r-jdk/bin", managed_root="/r/java_versions", markers=("jdk",), shared_root="/r",
        ) is True


class TestIsManagedEntry:
    @pytest.mark.parametrize("entry,expected", [
        (f"{ROOT}/v20.11.0/bin", True),
        (f"{ROOT}/current/bin", True),
        ("/usr/local/bin", False),
        ("", False),
        ("   ", False),
    ])
    def test_root_match(self, entry, expected):
        assert is_managed_entry(entry, managed_root=ROOT) is expected

    def test_case_sensitivity(self):
        upper = ROOT.upper() + "/current/bin"
        assert is_managed_entry(upper, managed_root=ROOT) is False
        assert is_managed_entry(upper, managed_root=ROOT, case_insensitive=True) is True

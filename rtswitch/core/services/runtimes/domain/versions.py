"""
L1 Domain — Version ordering (pure).

Numeric, dot-separated comparison: components compare as integers and
missing trailing components count as 0, so ``1.10.0 > 1.9.0`` and
``21 == 21.0.0``.  Build metadata after ``+`` only breaks ties.
No I/O, no subprocess.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable

from rtswitch.core.models.runtime import Release

# Pre-release / nightly / odd-channel markers: 3.13.0a1, 3.12.0rc2,
# 3.11.0b4, 22.0.0-rc.1, 1.0.dev3, 2.0.post1, 22-ea, nightly builds.
_PRERELEASE_RE = re.compile(
    r"(?:\d(?:a|b|rc|c)\d*(?:$|[.+-])|[-.]rc|dev|post|alpha|beta|preview|nightly|snapshot|[-.]ea\b)",
    re.IGNORECASE,
)

_LEADING_NON_DIGITS_RE = re.compile(r"^[^\d]*")
_DIGITS_RE = re.compile(r"\d+")


def split_build(version: str) -> tuple[str, str]:
    """Split ``"21.0.2+13"`` into ``("21.0.2", "13")``."""
    core, _, build = version.partition("+")
    return core, build


def version_parts(version: str) -> list[int]:
    """Integer components of a version's core (prefix and build stripped).

    ``"v20.11.0"`` → ``[20, 11, 0]``; ``"jdk-21.0.2+13"`` → ``[21, 0, 2]``.
    A component without digits counts as 0.
    """
    core, _ = split_build(version)
    core = _LEADING_NON_DIGITS_RE.sub("", core)
    parts: list[int] = []
    for piece in core.split("."):
        match = _DIGITS_RE.match(piece)
        parts.append(int(match.group()) if match else 0)
    return parts


def _build_parts(build: str) -> list[int]:
    return [int(n) for n in _DIGITS_RE.findall(build)]


def _cmp_lists(a: list[int], b: list[int]) -> int:
    width = max(len(a), len(b))
    for i in range(width):
        x = a[i] if i < len(a) else 0
        y = b[i] if i < len(b) else 0
        if x != y:
            return -1 if x < y else 1
    return 0


def compare_versions(a: str, b: str) -> int:
    """Three-way numeric compare.  Returns -1, 0 or 1."""
    result = _cmp_lists(version_parts(a), version_parts(b))
    if result:
        return result
    return _cmp_lists(_build_parts(split_build(a)[1]), _build_parts(split_build(b)[1]))


def is_prerelease(version: str) -> bool:
    """True for alpha/beta/rc/dev/post/early-access identifiers."""
    core, _ = split_build(version)
    return bool(_PRERELEASE_RE.search(core))


def sort_versions(versions: Iterable[str], *, descending: bool = True) -> list[str]:
    """Sort version strings numerically."""
    return sorted(
        versions,
        key=functools.cmp_to_key(compare_versions),
        reverse=descending,
    )


def _release_cmp(a: Release, b: Release) -> int:
    result = compare_versions(a.version, b.version)
    if result:
        return result
    return _cmp_lists(_build_parts(a.build or ""), _build_parts(b.build or ""))


def dedupe_releases(releases: Iterable[Release]) -> list[Release]:
    """Keep one release per version identifier.

    Identity ignores build metadata; when two entries differ only in
    their build, the greater build wins.
    """
    best: dict[str, Release] = {}
    for release in releases:
        key = split_build(release.version)[0]
        held = best.get(key)
        if held is None or _release_cmp(release, held) > 0:
            best[key] = release
    return list(best.values())


def sort_releases(releases: Iterable[Release], *, descending: bool = True) -> list[Release]:
    """Sort releases numerically by version (then build)."""
    return sorted(releases, key=functools.cmp_to_key(_release_cmp), reverse=descending)

"""
L1 Domain — PATH rewriting (pure).

Builds the new persistent PATH for an activation: drop every entry
that belongs to a managed version of the kind, then prepend the
``current`` pointer's executable directories.
No I/O, no subprocess.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence


def _norm(entry: str, *, case_insensitive: bool) -> str:
    value = entry.strip().rstrip("/\\")
    return value.lower() if case_insensitive else value


def _is_under(entry: str, root: str) -> bool:
    return entry == root or entry.startswith((root + "/", root + "\\"))


def is_managed_entry(
    entry: str,
    *,
    managed_root: str,
    markers: Iterable[str] = (),
    shared_root: str = "",
    case_insensitive: bool = False,
) -> bool:
    """True if ``entry`` points into ``managed_root`` or carries a kind marker.

    Markers always match case-insensitively (``JDK``, ``jdk``, ``Jdk``),
    but never inside ``shared_root``, whose own path may contain one.
    """
    if not entry.strip():
        return False
    norm_entry = _norm(entry, case_insensitive=case_insensitive)
    norm_root = _norm(managed_root, case_insensitive=case_insensitive)
    if norm_root and norm_root in norm_entry:
        return True
    norm_shared = _norm(shared_root, case_insensitive=case_insensitive)
    if norm_shared and _is_under(norm_entry, norm_shared):
        return False
    lowered = entry.lower()
    return any(marker.lower() in lowered for marker in markers)


def rewrite_path(
    current_value: str,
    new_entries: Sequence[str],
    *,
    managed_root: str,
    markers: Iterable[str] = (),
    shared_root: str = "",
    separator: str = ":",
    case_insensitive: bool = False,
) -> str:
    """Return ``current_value`` with managed entries replaced by ``new_entries``.

    Empty segments are dropped; the relative order of everything kept
    is preserved, and ``new_entries`` land at the front.

    Args:
        current_value: Existing PATH string (may be empty).
        new_entries: Directories to put first, in order.
        managed_root: Kind root; any entry under it is stripped.
        markers: Extra substrings marking an entry as owned by this kind.
        shared_root: Managed root holding every kind root; markers are
            not applied to entries beneath it.
        separator: ``os.pathsep`` of the target platform.
        case_insensitive: Compare paths case-insensitively (Windows).
    """
    markers = tuple(markers)
    kept = [
        entry
        for entry in current_value.split(separator)
        if entry.strip()
        and not is_managed_entry(
            entry,
            managed_root=managed_root,
            markers=markers,
            shared_root=shared_root,
            case_insensitive=case_insensitive,
        )
    ]
    return separator.join([*new_entries, *kept])

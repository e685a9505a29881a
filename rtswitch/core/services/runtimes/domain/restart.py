"""
L1 Domain — Restart notifications (pure).

Persistent environment writes are only observed by new processes, so
every activation tells the caller what to restart.
No I/O, no subprocess.
"""

from __future__ import annotations


def activation_notifications(
    display_name: str,
    version: str,
    *,
    variables: list[str],
    persisted: bool,
    windows: bool,
    profile: str | None = None,
) -> list[str]:
    """Human-readable follow-ups after switching the active version."""
    notes = [f"{display_name} {version} is now the active version."]

    if not persisted:
        notes.append(
            "Persistent environment was not updated — "
            "add the printed PATH entries yourself or use 'rtswitch exec'."
        )
        return notes

    changed = ", ".join(["PATH", *variables])
    if windows:
        notes.append(
            f"{changed} updated for your user — open a new terminal "
            "(or sign out and back in) for the change to take effect."
        )
    else:
        source = f" or run: source {profile}" if profile else ""
        notes.append(
            f"{changed} updated — restart your shell{source} "
            "for the change to take effect."
        )
    return notes

"""
L5 Orchestration — the entry point external code calls.
"""

from rtswitch.core.services.runtimes.orchestration.manager import RuntimeManager  # noqa: F401

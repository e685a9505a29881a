"""
Adapter registry — lookup of runtime kinds.

The registry is the single point of adapter management. The manager
never instantiates adapters directly — always through the registry,
so tests (and future kinds) can swap implementations in.
"""

from __future__ import annotations

import logging

from rtswitch.adapters.base import RuntimeAdapter
from rtswitch.core.errors import RuntimeSwitchError
from rtswitch.core.models.runtime import RuntimeKind

logger = logging.getLogger(__name__)


class UnknownKindError(RuntimeSwitchError):
    code = "unknown-kind"


class AdapterRegistry:
    """Registry of runtime adapters keyed by kind."""

    def __init__(self, adapters: list[RuntimeAdapter] | None = None):
        self._adapters: dict[RuntimeKind, RuntimeAdapter] = {}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: RuntimeAdapter) -> None:
        """Register an adapter, replacing any adapter of the same kind."""
        kind = adapter.kind
        if kind in self._adapters:
            logger.warning("Overwriting existing adapter: %s", kind.value)
        self._adapters[kind] = adapter
        logger.debug("Registered adapter: %s", kind.value)

    def get(self, kind: RuntimeKind | str) -> RuntimeAdapter:
        """Look up an adapter by kind.

        Raises:
            UnknownKindError: No adapter handles ``kind``.
        """
        try:
            key = RuntimeKind(kind)
        except ValueError:
            key = None
        adapter = self._adapters.get(key) if key is not None else None
        if adapter is None:
            known = ", ".join(k.value for k in self._adapters)
            raise UnknownKindError(
                f"Unknown runtime kind: {kind} (expected one of: {known})",
                kind=str(kind),
            )
        return adapter

    def kinds(self) -> list[RuntimeKind]:
        """All registered kinds, in registration order."""
        return list(self._adapters)


def default_registry() -> AdapterRegistry:
    """Registry with the built-in node / python / java adapters."""
    from rtswitch.adapters.runtimes import JavaAdapter, NodeAdapter, PythonAdapter

    return AdapterRegistry([NodeAdapter(), PythonAdapter(), JavaAdapter()])

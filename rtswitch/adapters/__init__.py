"""Adapters — per-kind bindings to upstream catalogs and archive layouts.

Public re-exports for convenient access.
"""

from rtswitch.adapters.base import RuntimeAdapter
from rtswitch.adapters.registry import AdapterRegistry, UnknownKindError, default_registry

__all__ = [
    "AdapterRegistry",
    "RuntimeAdapter",
    "UnknownKindError",
    "default_registry",
]

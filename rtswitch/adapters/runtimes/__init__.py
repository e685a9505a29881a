"""Runtime adapters — one per managed toolchain kind."""

from rtswitch.adapters.runtimes.java import JavaAdapter
from rtswitch.adapters.runtimes.node import NodeAdapter
from rtswitch.adapters.runtimes.python import PythonAdapter

__all__ = [
    "JavaAdapter",
    "NodeAdapter",
    "PythonAdapter",
]

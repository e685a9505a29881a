"""rtswitch — install, switch and remove runtime toolchain versions."""

__version__ = "0.1.0"

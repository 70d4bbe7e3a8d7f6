"""Generate IDE project and solution files from a compilation graph."""

__version__ = "0.1.0"

"""Multi-process banking simulation with a shared account table, disk writer and fraud monitor."""

__version__ = "0.1.0"
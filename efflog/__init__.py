"""Compressed, encrypted, crash-safe application logging."""

__version__ = "0.1.0"
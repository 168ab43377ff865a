"""Adaptive vocabulary drill service."""

__version__ = "0.1.0"

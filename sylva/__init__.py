"""Sylva: question answering over a tree species catalog."""

__version__ = "0.1.0"

"""Chorely: household chore tracking server."""

__version__ = "0.1.0"

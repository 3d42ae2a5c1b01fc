"""Zibaldone: manuscript fragments reconciled against an index and rendered to HTML."""

__version__ = "0.1.0"

"""Zaplanje cultural blog: content store API and reader client."""

__version__ = "1.0.0"

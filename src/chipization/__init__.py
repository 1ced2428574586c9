"""Chipization tracker: chipped animals, their types and visited locations."""

__version__ = "1.0.0"

"""
Database models for the relational hit storage.

The document and in-memory backends store HitRecord schemas directly and
have no table models.
"""

from .hit import Hit

__all__ = ["Hit"]

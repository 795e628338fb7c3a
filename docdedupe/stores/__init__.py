"""Stores shared across file repairs."""

from .identifier_cache import IdentifierCache, IdentifierSet, IndexLoadError

__all__ = ["IdentifierCache", "IdentifierSet", "IndexLoadError"]

"""
In-memory cache store for tests and local development.
"""

from .memory_store import InMemoryCacheStore

__all__ = ["InMemoryCacheStore"]

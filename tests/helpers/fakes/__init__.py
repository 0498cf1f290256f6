"""Fake implementations for external boundary clients used in tests."""

from .providers import FakeBoundaryClientProvider, FakeDatabaseProvider

__all__ = [
    "FakeBoundaryClientProvider",
    "FakeDatabaseProvider",
]

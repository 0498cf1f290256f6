"""Helper utilities for tests (domain object factories, directory seeding)."""

from .notifications import make_create, make_master, seed_users

__all__ = ["make_create", "make_master", "seed_users"]

"""
Backend Module
==============

Adapters for the hosted backend (auth, tables, photo storage).
"""

from .base import (
    Backend,
    BackendError,
    Badge,
    IdentitySummary,
    Profile,
    SessionRecord,
    User,
)
from .memory import InMemoryBackend


def create_backend(config) -> Backend:
    """Build the backend named by ``config.kind``."""
    if config.kind == "memory":
        return InMemoryBackend()
    if config.kind == "supabase":
        from .supabase_backend import SupabaseBackend
        return SupabaseBackend.from_config(config)
    raise BackendError(f"Unknown backend: {config.kind}")


__all__ = [
    "Backend",
    "BackendError",
    "Badge",
    "IdentitySummary",
    "Profile",
    "SessionRecord",
    "User",
    "InMemoryBackend",
    "create_backend",
]

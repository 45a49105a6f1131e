"""Repository layer (persistence-only)."""

from pageable.repositories.base import BaseRepository

__all__ = ["BaseRepository"]

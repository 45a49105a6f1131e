"""Process-wide cache of resolved ordering targets."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

V = TypeVar("V")

log = logging.getLogger(__name__)


class ResolutionCache(Generic[V]):
    """Key/value store for sort resolutions.

    Resolution of a key is deterministic, so concurrent callers racing on the
    same key may both compute it; the last write wins and both values are
    equal. A single ``dict`` item assignment is atomic, which is all the
    synchronization this needs.

    Entries live as long as the cache instance and are never invalidated
    implicitly; query shapes are assumed stable for a given key.
    """

    def __init__(self) -> None:
        self._entries: dict[str, V] = {}

    def get(self, key: str) -> V | None:
        return self._entries.get(key)

    def get_or_compute(self, key: str, compute: Callable[[], V]) -> V:
        """Return the value cached under ``key``, computing it on a miss.

        :param key: Deterministic resolution key.
        :type key: str
        :param compute: Zero-argument callable producing the value. Exceptions
            propagate and nothing is stored.
        :type compute: Callable[[], V]
        :returns: Cached or freshly computed value.
        """
        value = self._entries.get(key)
        if value is not None:
            return value
        log.debug("Resolution cache miss.", extra={"cache_key": key})
        value = compute()
        self._entries[key] = value
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ResolutionCache"]

import time
from collections.abc import Callable
from typing import Any

import structlog

logger = structlog.get_logger()


class ListingCache:
    """Process-local cache of rendered listing views, keyed by city and view.

    A view name may carry a qualifier after a colon (``languages:en``);
    invalidating the bare name drops every qualified variant for the city.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[str, str], tuple[float, Any]] = {}

    def get(self, city_slug: str, view_name: str) -> Any | None:
        entry = self._entries.get((city_slug, view_name))
        if entry is None:
            return None
        expires_at, payload = entry
        if self._clock() >= expires_at:
            del self._entries[(city_slug, view_name)]
            return None
        return payload

    def set(self, city_slug: str, view_name: str, payload: Any) -> None:
        if self._ttl <= 0:
            return
        self._entries[(city_slug, view_name)] = (self._clock() + self._ttl, payload)

    def invalidate(self, city_slug: str, view_name: str) -> int:
        stale = [
            key
            for key in self._entries
            if key[0] == city_slug
            and (key[1] == view_name or key[1].startswith(f"{view_name}:"))
        ]
        for key in stale:
            del self._entries[key]

        logger.info("listing_cache_invalidated", city=city_slug, view=view_name, entries=len(stale))
        return len(stale)

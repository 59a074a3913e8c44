"""Process-local TTL cache for radius-search results."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Generic, TypeVar

from app.core.config import Settings
from app.services.geo import clamp_radius, quantize

logger = logging.getLogger(__name__)

T = TypeVar("T")


def search_cache_key(lat: float, lon: float, radius_m: int, precision: int = 2) -> str:
    """Key of one quantized search bucket, e.g. ``toilets_52.52_13.40_1000``."""
    return f"toilets_{quantize(lat, precision):.{precision}f}_{quantize(lon, precision):.{precision}f}_{radius_m}"


class QueryCache(Generic[T]):
    """Thread-safe key/value store with per-entry expiry.

    Created once at application startup and handed to request handlers; a
    shared external cache can replace it as long as it offers the same
    ``get`` / ``set`` / ``invalidate_all`` methods.
    """

    def __init__(self, ttl_seconds: float = 3600.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, list[T]]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, config: Settings) -> "QueryCache":
        return cls(ttl_seconds=config.cache_ttl_seconds)

    def get(self, key: str) -> list[T] | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return list(value)

    def set(self, key: str, value: list[T], ttl_seconds: float | None = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._entries[key] = (self._clock() + ttl, list(value))

    def invalidate_all(self) -> None:
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        logger.info("Query cache invalidated (%d entries dropped)", dropped)

    def keys(self) -> list[str]:
        """Live (non-expired) keys."""
        now = self._clock()
        with self._lock:
            return sorted(k for k, (expires_at, _v) in self._entries.items() if expires_at > now)


def cache_key_for(config: Settings, lat: float, lon: float, radius_m: float | None) -> tuple[float, float, int, str]:
    """Quantize a search request: returns (rounded_lat, rounded_lon, clamped_radius, key)."""
    radius = clamp_radius(
        radius_m,
        default_m=config.search_default_radius_m,
        minimum_m=config.search_min_radius_m,
        step_m=config.search_radius_step_m,
    )
    precision = config.cache_coord_precision
    rounded_lat = quantize(lat, precision)
    rounded_lon = quantize(lon, precision)
    return rounded_lat, rounded_lon, radius, search_cache_key(lat, lon, radius, precision)

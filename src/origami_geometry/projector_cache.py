"""
Bounded, time-expiring cache of plane projectors.

A folded figure reuses a handful of planes over and over, and a projector is
immutable once built, so one projector per distinct plane is kept. Building
a projector is cheap and side-effect free: two threads missing on the same
plane may both build one, but only the first inserted is ever handed out.
"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from origami_geometry.primitives import Plane
from origami_geometry.projection import PlaneProjector, make_projector
from origami_geometry.tolerance import TOLERANCE, GeometryConfig

logger = logging.getLogger(__name__)


class ProjectorCache:
    """Plane-keyed LRU cache whose entries expire a fixed time after insertion."""

    def __init__(
        self,
        max_size: int = 100,
        ttl_seconds: float = 600.0,
        tolerance: float = TOLERANCE,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size < 1:
            raise ValueError(f"Cache size must be at least 1, got {max_size}")
        if ttl_seconds <= 0.0:
            raise ValueError(f"Cache TTL must be positive, got {ttl_seconds}")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self.tolerance = tolerance
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[Tuple[float, ...], Tuple[float, PlaneProjector]]" = OrderedDict()

    @classmethod
    def from_config(cls, config: GeometryConfig) -> "ProjectorCache":
        return cls(
            max_size=config.cache_max_size,
            ttl_seconds=config.cache_ttl_seconds,
            tolerance=config.tolerance,
        )

    def get(self, plane: Plane) -> PlaneProjector:
        """Projector for the plane, built on first use."""
        key = plane.cache_key()
        cached = self._lookup(key)
        if cached is not None:
            return cached

        projector = make_projector(plane, self.tolerance)
        with self._lock:
            existing = self._live_entry(key)
            if existing is not None:
                # Lost the race, hand out the projector already cached
                return existing
            self._entries[key] = (self._clock(), projector)
            while len(self._entries) > self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted projector for plane %s", evicted)
        return projector

    def __contains__(self, plane: Plane) -> bool:
        with self._lock:
            return self._live_entry(plane.cache_key()) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _lookup(self, key: Tuple[float, ...]) -> Optional[PlaneProjector]:
        with self._lock:
            return self._live_entry(key)

    def _live_entry(self, key: Tuple[float, ...]) -> Optional[PlaneProjector]:
        # Caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            return None
        written_at, projector = entry
        if self._clock() - written_at >= self.ttl_seconds:
            del self._entries[key]
            logger.debug("Projector for plane %s expired", key)
            return None
        self._entries.move_to_end(key)
        return projector

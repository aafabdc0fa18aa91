"""Process-wide snapshot cache with a time-to-live refresh policy.

The cache is either ``COLD`` (nothing fetched yet) or ``WARM``. Reads refresh
the snapshot once it is older than the TTL. A failed refresh keeps serving the
previous snapshot; only a cold cache lets the failure reach the caller.

At most one refresh runs at a time. Concurrent readers that arrive during a
refresh wait (bounded) for that same refresh instead of starting their own.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum

from .core import PoolSnapshot
from .errors import UpstreamUnavailable
from .pipeline import Pipeline
from .sources import RawPoolSource

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 120.0


class CacheState(StrEnum):
    COLD = "cold"
    WARM = "warm"


class _Flight:
    """One in-progress refresh shared by every caller that asked for it."""

    def __init__(self) -> None:
        self.done = threading.Event()
        self.error: UpstreamUnavailable | None = None


class PoolCache:
    """Owns the current :class:`PoolSnapshot` and its refresh lifecycle."""

    def __init__(
        self,
        source: RawPoolSource,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = lambda: datetime.now(tz=UTC),
        wait_timeout: float | None = 60.0,
    ) -> None:
        self._pipeline = Pipeline(source)
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._wall_clock = wall_clock
        self._wait_timeout = wait_timeout
        self._lock = threading.Lock()
        self._snapshot: PoolSnapshot | None = None
        self._last_fetch: float | None = None
        self._flight: _Flight | None = None
        self._closed = False

    @property
    def state(self) -> CacheState:
        return CacheState.COLD if self._snapshot is None else CacheState.WARM

    @property
    def snapshot(self) -> PoolSnapshot | None:
        """Current snapshot without triggering a refresh."""

        return self._snapshot

    def is_stale(self) -> bool:
        if self._snapshot is None or self._last_fetch is None:
            return True
        return self._clock() - self._last_fetch >= self.ttl_seconds

    def init(self) -> bool:
        """Warm the cache eagerly; returns ``False`` (and logs) on failure."""

        if self._closed:
            return False
        try:
            self.get_snapshot()
        except UpstreamUnavailable as exc:
            logger.error("Initial pool fetch failed: %s", exc)
            return False
        return True

    def get_snapshot(self) -> PoolSnapshot:
        """Return a snapshot, refreshing first when the current one expired.

        Raises :class:`UpstreamUnavailable` only while the cache is cold.
        """

        if self._closed:
            raise RuntimeError("PoolCache has been shut down")
        if self.is_stale():
            self._refresh()
        snapshot = self._snapshot
        if snapshot is None:
            raise UpstreamUnavailable("No pool data available")
        return snapshot

    def force_refresh(self) -> PoolSnapshot:
        """Expire the snapshot and read again, refetching immediately."""

        with self._lock:
            self._last_fetch = None
        return self.get_snapshot()

    def shutdown(self) -> None:
        with self._lock:
            self._closed = True
            self._snapshot = None
            self._last_fetch = None

    def _refresh(self) -> None:
        with self._lock:
            # another leader may have finished since the caller saw a stale snapshot
            if self._flight is None and not self.is_stale():
                return
            flight = self._flight
            leader = flight is None
            if leader:
                flight = self._flight = _Flight()
        assert flight is not None

        if not leader:
            if not flight.done.wait(self._wait_timeout):
                logger.warning("Timed out waiting for in-flight pool refresh")
            elif flight.error is not None and self._snapshot is None:
                raise flight.error
            return

        snapshot: PoolSnapshot | None = None
        try:
            snapshot = self._pipeline.run(now=self._wall_clock())
        except UpstreamUnavailable as exc:
            flight.error = exc
        except Exception as exc:
            flight.error = UpstreamUnavailable(f"Pool refresh failed: {exc}")
            flight.error.__cause__ = exc
        finally:
            with self._lock:
                if snapshot is not None and not self._closed:
                    self._snapshot = snapshot
                    self._last_fetch = self._clock()
                self._flight = None
                closed = self._closed
                current = self._snapshot
            flight.done.set()

        if closed:
            logger.info("Pool cache shut down during refresh, discarding result")
            return
        if flight.error is not None:
            if current is None:
                raise flight.error
            logger.warning(
                "Pool refresh failed, serving snapshot from %s: %s",
                current.last_updated,
                flight.error,
            )
            return
        assert snapshot is not None
        logger.info("Cached %d pools (lastUpdated=%s)", len(snapshot.pools), snapshot.last_updated)


__all__ = ["PoolCache", "CacheState", "DEFAULT_TTL_SECONDS"]

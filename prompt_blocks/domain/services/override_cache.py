"""Time-boxed cache for prompt override snapshots."""

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from prompt_blocks.domain.prompts.types import OverrideSnapshot
from prompt_blocks.infrastructure.redis import RedisClient, redis_client
from prompt_blocks.settings import settings

logger = logging.getLogger(__name__)

OVERRIDES_CACHE_KEY = "prompt_blocks:overrides"

SnapshotLoader = Callable[[], Awaitable[OverrideSnapshot]]


@dataclass(frozen=True)
class _CacheEntry:
    snapshot: OverrideSnapshot
    expires_at: float


class OverrideCache:
    """Two-tier cache: a process-local snapshot over a shared Redis key.

    The local entry is immutable and replaced wholesale, never mutated, so
    readers need no lock. A resolution that already holds an entry keeps
    using it even if another task invalidates concurrently, but a load that
    started before an invalidation is never stored. Other processes keep
    their own local entry until its TTL lapses.
    """

    def __init__(
        self,
        ttl_seconds: int | None = None,
        redis: RedisClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = settings.prompt_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._redis = redis if redis is not None else redis_client
        self._clock = clock
        self._entry: _CacheEntry | None = None
        # Bumped by every invalidation
        self._generation = 0

    def peek(self) -> OverrideSnapshot | None:
        """Return the local snapshot if it has not expired."""
        entry = self._entry
        if entry is not None and self._clock() < entry.expires_at:
            return entry.snapshot
        return None

    async def get(self, loader: SnapshotLoader) -> OverrideSnapshot:
        """Get the current snapshot, loading it through ``loader`` on a miss.

        Raises whatever ``loader`` raises; callers decide how to degrade.
        """
        snapshot = self.peek()
        if snapshot is not None:
            return snapshot

        generation = self._generation
        snapshot = await self._read_shared()
        if snapshot is None:
            snapshot = await loader()
            if generation != self._generation:
                logger.debug("Prompt overrides changed during load, not caching")
                return snapshot
            await self._write_shared(snapshot)

        if generation != self._generation:
            # Invalidated mid-load; the shared copy may be stale too
            await self._delete_shared()
            return snapshot
        self._entry = _CacheEntry(snapshot=snapshot, expires_at=self._clock() + self.ttl_seconds)
        return snapshot

    async def invalidate(self) -> None:
        """Drop the local snapshot and the shared key."""
        self._generation += 1
        self._entry = None
        await self._delete_shared()

    async def _delete_shared(self) -> None:
        try:
            await self._redis.delete(OVERRIDES_CACHE_KEY)
        except Exception as e:
            logger.warning(f"Failed to delete shared prompt override cache: {e}")

    async def _read_shared(self) -> OverrideSnapshot | None:
        try:
            data = await self._redis.get_json(OVERRIDES_CACHE_KEY)
        except Exception as e:
            logger.warning(f"Shared prompt override cache read failed: {e}")
            return None
        if data is None:
            return None
        try:
            return OverrideSnapshot.from_dict(data)
        except (TypeError, AttributeError) as e:
            logger.warning(f"Discarding malformed shared prompt override cache entry: {e}")
            return None

    async def _write_shared(self, snapshot: OverrideSnapshot) -> None:
        try:
            await self._redis.set_json(OVERRIDES_CACHE_KEY, snapshot.to_dict(), ttl=self.ttl_seconds)
        except Exception as e:
            logger.warning(f"Shared prompt override cache write failed: {e}")


# Process-wide cache shared by every PromptService
override_cache = OverrideCache()

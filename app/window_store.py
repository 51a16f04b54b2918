"""Fixed-window counters keyed by identifier, in-process or Redis-backed."""
import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

import redis
import redis.asyncio as aioredis

from app.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateWindowEntry:
    count: int
    window_reset_at: float  # epoch seconds


class WindowStore(ABC):
    """Mapping from identifier to RateWindowEntry with atomic increment."""

    backend: str = "abstract"

    @abstractmethod
    async def increment(self, identifier: str, window_seconds: float) -> RateWindowEntry:
        """Count one request against ``identifier``.

        Starts a fresh window (count=1) when there is no entry or the existing
        window has expired; otherwise increments the live window. Raises
        StoreUnavailable if the backing store cannot be reached.
        """

    @abstractmethod
    async def sweep_expired(self, now: float) -> int:
        """Drop entries whose window ended before ``now``. Returns the number removed."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class InMemoryWindowStore(WindowStore):
    """Single-process store. Correct only when one server process handles all traffic."""

    backend = "memory"

    def __init__(self) -> None:
        self._entries: dict[str, RateWindowEntry] = {}
        self._lock = asyncio.Lock()

    async def increment(self, identifier: str, window_seconds: float) -> RateWindowEntry:
        now = time.time()
        async with self._lock:
            entry = self._entries.get(identifier)
            if entry is None or now >= entry.window_reset_at:
                entry = RateWindowEntry(count=1, window_reset_at=now + window_seconds)
            else:
                entry = RateWindowEntry(count=entry.count + 1, window_reset_at=entry.window_reset_at)
            self._entries[identifier] = entry
            return entry

    async def sweep_expired(self, now: float) -> int:
        async with self._lock:
            # Compare against the entry as it is now, not a stale snapshot
            stale = [key for key, entry in self._entries.items() if entry.window_reset_at < now]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)


# INCR creates the key at 1; the TTL is set only when this call opened the
# window, so later increments never push the reset time out.
INCREMENT_SCRIPT = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('PEXPIRE', KEYS[1], ARGV[1])
end
local ttl = redis.call('PTTL', KEYS[1])
if ttl < 0 then
    redis.call('PEXPIRE', KEYS[1], ARGV[1])
    ttl = tonumber(ARGV[1])
end
return {count, ttl}
"""

REDIS_EXCEPTIONS = (redis.RedisError, asyncio.TimeoutError, OSError)


class RedisWindowStore(WindowStore):
    """Redis-backed store, shared by every server process pointed at the same Redis.

    Expiry is left to Redis key TTLs, so ``sweep_expired`` has nothing to do.
    """

    backend = "redis"

    def __init__(
        self,
        client: aioredis.Redis,
        prefix: str = "tripbrief:ratelimit",
        timeout_seconds: float = 0.5,
    ) -> None:
        self._redis = client
        self._prefix = prefix
        self._timeout = timeout_seconds

    @classmethod
    def from_url(cls, url: str, prefix: str = "tripbrief:ratelimit", timeout_seconds: float = 0.5) -> "RedisWindowStore":
        client = aioredis.from_url(
            url,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
        )
        return cls(client, prefix=prefix, timeout_seconds=timeout_seconds)

    def _key(self, identifier: str) -> str:
        return f"{self._prefix}:{identifier}"

    async def increment(self, identifier: str, window_seconds: float) -> RateWindowEntry:
        window_ms = max(1, int(window_seconds * 1000))
        now = time.time()
        try:
            count, ttl_ms = await asyncio.wait_for(
                self._redis.eval(INCREMENT_SCRIPT, 1, self._key(identifier), window_ms),
                timeout=self._timeout,
            )
        except REDIS_EXCEPTIONS as exc:
            raise StoreUnavailable(f"Redis increment failed: {exc!r}") from exc
        return RateWindowEntry(count=int(count), window_reset_at=now + int(ttl_ms) / 1000)

    async def sweep_expired(self, now: float) -> int:
        return 0

    async def ping(self) -> bool:
        try:
            return bool(await asyncio.wait_for(self._redis.ping(), timeout=self._timeout))
        except REDIS_EXCEPTIONS:
            logger.warning("Redis ping failed", exc_info=True)
            return False

    async def close(self) -> None:
        await self._redis.aclose()


def create_store(redis_url: str | None, prefix: str, timeout_seconds: float) -> WindowStore:
    """Pick the Redis store when a URL is configured, else the in-process map."""
    if redis_url:
        logger.info("Rate limit store: redis (prefix %s)", prefix)
        return RedisWindowStore.from_url(redis_url, prefix=prefix, timeout_seconds=timeout_seconds)
    logger.info("Rate limit store: in-memory (single process only)")
    return InMemoryWindowStore()

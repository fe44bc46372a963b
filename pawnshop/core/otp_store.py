import asyncio
import time
from typing import Dict, Optional, Tuple

import redis.asyncio as redis_async


class OTPStore:
    """Keeps at most one live one-time code per email.

    Uses Redis when a REDIS_URL is provided, otherwise an in-process map with
    TTL expiry, which is enough for a single-instance deployment and tests.
    """

    KEY_PREFIX = "otp:"

    def __init__(self, redis_url: Optional[str] = None):
        self._use_redis = bool(redis_url)
        if self._use_redis:
            self._client = redis_async.from_url(redis_url, decode_responses=True)
        else:
            # in-memory store: email -> (code, expire_at)
            self._store: Dict[str, Tuple[str, float]] = {}
            self._lock = asyncio.Lock()

    async def set(self, email: str, code: str, ttl_seconds: int) -> None:
        """Store a code, replacing any previous one for the same email."""
        if self._use_redis:
            await self._client.set(self.KEY_PREFIX + email, code, ex=ttl_seconds)
            return

        async with self._lock:
            self._purge_expired()
            self._store[email] = (code, time.monotonic() + ttl_seconds)

    async def consume(self, email: str, code: str) -> bool:
        """True when `code` is the live code for `email`; a matching code is removed."""
        if self._use_redis:
            key = self.KEY_PREFIX + email
            stored = await self._client.get(key)
            if stored is None or stored != code:
                return False
            # Only the caller whose DEL removed the key gets to use the code
            return await self._client.delete(key) == 1

        async with self._lock:
            self._purge_expired()
            entry = self._store.get(email)
            if entry is None or entry[0] != code:
                return False
            del self._store[email]
            return True

    async def clear(self) -> None:
        if self._use_redis:
            async for key in self._client.scan_iter(match=self.KEY_PREFIX + "*"):
                await self._client.delete(key)
            return
        async with self._lock:
            self._store.clear()

    def _purge_expired(self) -> None:
        now = time.monotonic()
        expired = [k for k, (_, expire_at) in self._store.items() if expire_at < now]
        for k in expired:
            del self._store[k]

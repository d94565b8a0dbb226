# shgame/store/redis_repo.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Sequence

import structlog
from redis.asyncio import Redis
from redis.exceptions import LockError, RedisError

from shgame.store.errors import StoreError

log = structlog.get_logger(__name__)


class RedisStore:
    """
    The only component that talks to Redis.
    Entities go through it for batched reads, atomic writes, deletes and locks.
    """
    def __init__(
        self,
        r: Redis,
        entity_ttl_sec: int = 60 * 60 * 24,
        lock_timeout_sec: float = 10.0,
        lock_wait_sec: float = 5.0,
    ):
        self.r = r
        self.entity_ttl_sec = entity_ttl_sec
        self.lock_timeout_sec = lock_timeout_sec
        self.lock_wait_sec = lock_wait_sec

    def _dec(self, x):
        """Decode redis bytes -> str; pass through str/None safely."""
        if x is None:
            return None
        if isinstance(x, bytes):
            return x.decode("utf-8")
        return x

    # ----------------------------
    # Records
    # ----------------------------
    async def load_fields(self, key: str, fields: Sequence[str]) -> List[Optional[str]]:
        try:
            raw = await self.r.hmget(key, list(fields))
        except RedisError as e:
            log.error("store_load_failed", key=key, error=str(e))
            raise StoreError(f"load {key} failed") from e
        return [self._dec(x) for x in raw]

    async def save_fields(self, key: str, mapping: Dict[str, str]) -> None:
        # HSET + EXPIRE in one MULTI/EXEC: both apply or neither does
        pipe = self.r.pipeline(transaction=True)
        pipe.hset(key, mapping=mapping)
        pipe.expire(key, self.entity_ttl_sec)
        try:
            await pipe.execute()
        except RedisError as e:
            log.error("store_save_failed", key=key, error=str(e))
            raise StoreError(f"save {key} failed") from e

    async def delete(self, key: str) -> int:
        try:
            return int(await self.r.delete(key))
        except RedisError as e:
            log.error("store_delete_failed", key=key, error=str(e))
            raise StoreError(f"delete {key} failed") from e

    # ----------------------------
    # Locks
    # ----------------------------
    @asynccontextmanager
    async def lock(self, name: str) -> AsyncIterator[None]:
        """
        Hold a redis lock for the duration of the block.
        Auto-expires after lock_timeout_sec so a crashed holder cannot wedge the key.
        """
        lk = self.r.lock(name, timeout=self.lock_timeout_sec, blocking_timeout=self.lock_wait_sec)
        try:
            acquired = await lk.acquire()
        except RedisError as e:
            raise StoreError(f"lock {name} failed") from e
        if not acquired:
            log.warning("lock_wait_timeout", lock=name)
            raise StoreError(f"timed out waiting for {name}")
        try:
            yield
        finally:
            try:
                await lk.release()
            except LockError:
                # expired while held; the work already ran
                log.warning("lock_expired_before_release", lock=name)

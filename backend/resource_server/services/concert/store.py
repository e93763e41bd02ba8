"""
Redis Session Store

Implements SessionStoreProtocol on top of redis.asyncio:
- JSON documents with per-key TTL (SET EX)
- Check-and-set updates under WATCH that keep the remaining TTL (SET XX KEEPTTL)
- Atomic set membership (SADD / SREM report whether state changed), with a
  capacity-checked insert under WATCH on the set
- Sorted-set index for time-ordered discovery

Connection and timeout errors are translated into SessionStoreUnavailableError
so callers only see the concert exception hierarchy.
"""
from typing import Callable, List, Optional, Sequence
import functools
import logging

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.exceptions import WatchError

from resource_server.services.protocols import Admission

from .exceptions import ConcurrentModificationError, SessionStoreUnavailableError

logger = logging.getLogger(__name__)


def _translate_errors(func):
    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.error(f"[Store] {func.__name__} failed: {e}")
            raise SessionStoreUnavailableError(f"Session store unavailable: {e}") from e
    return wrapper


class RedisSessionStore:
    """Session store backed by a redis.asyncio client (decode_responses=True)."""

    def __init__(self, client: redis.Redis):
        self._redis = client

    @_translate_errors
    async def ping(self) -> bool:
        return bool(await self._redis.ping())

    # === Documents ===

    @_translate_errors
    async def get_document(self, key: str) -> Optional[str]:
        return await self._redis.get(key)

    @_translate_errors
    async def get_documents(self, keys: Sequence[str]) -> List[Optional[str]]:
        if not keys:
            return []
        return await self._redis.mget(list(keys))

    @_translate_errors
    async def put_document(self, key: str, value: str, ttl: int) -> None:
        await self._redis.set(key, value, ex=ttl)

    @_translate_errors
    async def update_document(
        self,
        key: str,
        transform: Callable[[str], str],
        default_ttl: int,
    ) -> Optional[str]:
        # The gap between TTL read and write is covered by WATCH: if the key
        # expires or changes in between, EXEC aborts. XX keeps an expired key
        # from being recreated without a TTL.
        async with self._redis.pipeline(transaction=True) as pipe:
            try:
                await pipe.watch(key)
                current = await pipe.get(key)
                if current is None:
                    return None
                remaining = await pipe.ttl(key)

                updated = transform(current)

                pipe.multi()
                if remaining > 0:
                    pipe.set(key, updated, xx=True, keepttl=True)
                else:
                    pipe.set(key, updated, xx=True, ex=default_ttl)
                results = await pipe.execute()
            except WatchError as e:
                logger.debug(f"[Store] Watched key {key} changed during update")
                raise ConcurrentModificationError(key) from e

        if not results[0]:
            return None
        return updated

    @_translate_errors
    async def ttl(self, key: str) -> int:
        return await self._redis.ttl(key)

    @_translate_errors
    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return await self._redis.delete(*keys)

    # === Sets ===

    @_translate_errors
    async def add_member_capped(
        self,
        key: str,
        member: str,
        capacity: int,
        ttl: Optional[int] = None,
    ) -> Admission:
        # A WatchError here means another writer changed the set and made
        # progress, so retrying until EXEC commits always terminates.
        while True:
            async with self._redis.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(key)
                    if await pipe.sismember(key, member):
                        return Admission.PRESENT
                    if await pipe.scard(key) >= capacity:
                        return Admission.FULL

                    pipe.multi()
                    pipe.sadd(key, member)
                    if ttl:
                        pipe.expire(key, ttl)
                    await pipe.execute()
                    return Admission.ADDED
                except WatchError:
                    logger.debug(f"[Store] Set {key} changed during capped add, retrying")

    @_translate_errors
    async def remove_member(self, key: str, member: str) -> bool:
        return bool(await self._redis.srem(key, member))

    @_translate_errors
    async def is_member(self, key: str, member: str) -> bool:
        return bool(await self._redis.sismember(key, member))

    @_translate_errors
    async def count_members(self, key: str) -> int:
        return await self._redis.scard(key)

    @_translate_errors
    async def count_members_many(self, keys: Sequence[str]) -> List[int]:
        if not keys:
            return []
        async with self._redis.pipeline(transaction=False) as pipe:
            for key in keys:
                pipe.scard(key)
            return await pipe.execute()

    # === Sorted-set index ===

    @_translate_errors
    async def index_add(self, key: str, member: str, score: float) -> None:
        await self._redis.zadd(key, {member: score})

    @_translate_errors
    async def index_remove(self, key: str, *members: str) -> int:
        if not members:
            return 0
        return await self._redis.zrem(key, *members)

    @_translate_errors
    async def index_range(
        self,
        key: str,
        limit: Optional[int] = None,
        descending: bool = False,
        offset: int = 0,
    ) -> List[str]:
        if limit is not None and limit <= 0:
            return []
        start = max(offset, 0)
        end = -1 if limit is None else start + limit - 1
        if descending:
            return await self._redis.zrevrange(key, start, end)
        return await self._redis.zrange(key, start, end)

"""
Redis-backed token store.

Keeps the token pair as a JSON string under TOKEN_STORAGE_KEY, for clients
running in environments that share credentials across processes (workers,
CLI and daemon on one host).

**Security Note**: The stored value holds live credentials. Ensure REDIS_URL
uses TLS (rediss://) off localhost, and never log the connection URL.
"""

import asyncio
import json
from typing import Optional

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from marketplace_client.core.config.settings import settings
from marketplace_client.core.exceptions import StorageError
from marketplace_client.domain.interfaces.token_store import ITokenStore
from marketplace_client.domain.value_objects.token_pair import TokenPair

logger = structlog.get_logger(__name__)


def create_redis_client(url: Optional[str] = None) -> Redis:
    """Build an asynchronous Redis client from settings."""
    client = Redis.from_url(url or settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    logger.debug("Redis connection created")
    return client


class RedisTokenStore(ITokenStore):
    """Token store persisting the pair in Redis.

    Each operation is a single Redis command. A lock keeps the operations of
    one process ordered.

    Args:
        redis: Asynchronous Redis client.
        storage_key: Key the pair is stored under.
    """

    def __init__(self, redis: Redis, storage_key: Optional[str] = None):
        self._redis = redis
        self._storage_key = storage_key or settings.TOKEN_STORAGE_KEY
        self._lock = asyncio.Lock()

    async def save(self, pair: TokenPair) -> None:
        try:
            async with self._lock:
                await self._redis.set(self._storage_key, json.dumps(pair.to_dict()))
        except RedisError as e:
            logger.error("Token pair could not be saved", backend="redis", error=str(e))
            raise StorageError("Credentials could not be saved") from e
        logger.debug("Token pair saved", backend="redis", token=pair.mask_for_logging())

    async def load(self) -> Optional[TokenPair]:
        try:
            async with self._lock:
                raw = await self._redis.get(self._storage_key)
        except RedisError as e:
            logger.error("Token pair could not be read", backend="redis", error=str(e))
            raise StorageError("Stored credentials are unreadable") from e
        if raw is None:
            return None
        try:
            return TokenPair.from_dict(json.loads(raw))
        except (ValueError, TypeError) as e:
            logger.error("Stored token record is malformed", backend="redis", error=str(e))
            raise StorageError("Stored credentials are unreadable") from e

    async def clear(self) -> None:
        try:
            async with self._lock:
                await self._redis.delete(self._storage_key)
        except RedisError as e:
            logger.error("Token pair could not be cleared", backend="redis", error=str(e))
            raise StorageError("Stored credentials could not be cleared") from e
        logger.debug("Token pair cleared", backend="redis")

    async def close(self) -> None:
        await self._redis.aclose()
        logger.debug("Redis connection closed")

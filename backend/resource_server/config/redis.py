import redis.asyncio as redis
from resource_server.config.settings import settings


def build_redis_url() -> str:
    url = f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"
    if settings.REDIS_PASSWORD:
        url = f"redis://:{settings.REDIS_PASSWORD}@{settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"
    return url


def create_redis(url: str | None = None) -> redis.Redis:
    """Create a Redis client. Owned by the caller (app lifespan or script)."""
    return redis.Redis.from_url(
        url or build_redis_url(),
        decode_responses=True,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
    )


async def close_redis(client: redis.Redis | None):
    if client is not None:
        await client.aclose()

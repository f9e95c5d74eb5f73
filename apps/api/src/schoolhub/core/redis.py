"""
Redis Configuration

Optional async Redis client, used as the rate limiting backend.
"""

from redis.asyncio import Redis, from_url

from schoolhub.core.config import settings

# Redis client instance
redis_client: Redis | None = None


async def init_redis() -> Redis | None:
    """
    Initialize Redis connection if REDIS_URL is configured.

    Call this on application startup.
    """
    global redis_client
    if not settings.redis_url:
        return None

    client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    # Test connection
    await client.ping()
    redis_client = client
    return redis_client


async def get_redis() -> Redis | None:
    """
    Get Redis client instance.

    Returns None if Redis is not configured or not connected.
    """
    return redis_client


def is_redis_available() -> bool:
    """Check if Redis client is initialized and available."""
    return redis_client is not None


async def close_redis() -> None:
    """Close Redis connection."""
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None

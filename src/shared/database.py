"""Redis connection management for the analytics store backend."""

import asyncio
import logging

import redis.asyncio as redis

from src.shared.config import get_settings
from src.shared.feature_flags import is_redis_analytics_store_enabled

logger = logging.getLogger(__name__)


# ===================
# Redis
# ===================

_redis_pool = None


async def get_redis() -> redis.Redis:
    """Get Redis connection from pool.

    Usage:
        redis_client = await get_redis()
        await redis_client.set("key", "value")
        value = await redis_client.get("key")
    """
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.ConnectionPool.from_url(
            get_settings().redis_url,
            decode_responses=True,
        )
    return redis.Redis(connection_pool=_redis_pool)


async def close_redis() -> None:
    """Close Redis connection pool.

    Call this on application shutdown.
    """
    global _redis_pool
    if _redis_pool is not None:
        try:
            await _redis_pool.aclose()
        except Exception as e:
            logger.warning(f"Error closing Redis pool: {e}")
        finally:
            _redis_pool = None


# ===================
# Lifecycle Helpers
# ===================


async def check_redis_health(max_retries: int = 3, retry_delay: float = 1.0) -> bool:
    """Check Redis health with retries.

    Args:
        max_retries: Maximum number of retry attempts
        retry_delay: Delay between retries in seconds

    Returns:
        True if Redis is healthy, False otherwise
    """
    for attempt in range(max_retries):
        try:
            redis_client = await get_redis()
            await redis_client.ping()
            logger.debug("Redis health check passed")
            return True
        except Exception as e:
            logger.warning(f"Redis health check failed (attempt {attempt + 1}/{max_retries}): {e}")
            if attempt < max_retries - 1:
                await asyncio.sleep(retry_delay)
    return False


async def get_health_status() -> dict:
    """Get health status of the configured store backend.

    Returns:
        Dictionary with health status for each connection
    """
    if not is_redis_analytics_store_enabled():
        return {
            "store": {"healthy": True, "type": "memory"},
            "overall": True,
        }

    redis_healthy = await check_redis_health(max_retries=1, retry_delay=0)
    return {
        "store": {"healthy": redis_healthy, "type": "redis"},
        "overall": redis_healthy,
    }


async def startup() -> None:
    """Initialize connections on application startup."""
    if is_redis_analytics_store_enabled():
        if not await check_redis_health(max_retries=5, retry_delay=2.0):
            raise RuntimeError("Failed to connect to Redis after retries")
        logger.info("Redis analytics store connection initialized")


async def shutdown() -> None:
    """Close connections on application shutdown."""
    await close_redis()
    logger.info("Store connections closed")

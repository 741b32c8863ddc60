"""Redis configuration module."""

import logging
from typing import Optional
from urllib.parse import urlparse

import redis.asyncio as redis

from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def mask_redis_url(redis_url: str) -> str:
    """Hide the password part of a Redis URL for logging."""
    if "@" not in redis_url:
        return redis_url
    prefix, rest = redis_url.split("@", 1)
    if ":" in prefix.split("//", 1)[-1]:
        protocol, _ = prefix.rsplit(":", 1)
        return f"{protocol}:***@{rest}"
    return redis_url


async def init_redis(settings: Optional[Settings] = None) -> redis.Redis:
    """Create the Redis client used as the destination queue.

    Raises:
        ValueError: If REDIS_URL is malformed
        redis.ConnectionError: If the server cannot be reached
    """
    settings = settings or get_settings()
    redis_url = settings.REDIS_URL

    parsed_url = urlparse(redis_url)
    if parsed_url.scheme not in ("redis", "rediss", "unix") or not (parsed_url.hostname or parsed_url.path):
        raise ValueError("Invalid Redis URL format")

    logger.info(f"Connecting to Redis at {mask_redis_url(redis_url)}")
    client = redis.from_url(
        redis_url,
        decode_responses=True,
        encoding="utf-8",
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
        retry_on_timeout=True,
    )
    await client.ping()
    logger.info("Successfully connected to Redis")
    return client


async def close_redis(client: Optional[redis.Redis]) -> None:
    """Close a Redis client created by init_redis."""
    if client is not None:
        await client.aclose()
        logger.info("Redis connection closed")

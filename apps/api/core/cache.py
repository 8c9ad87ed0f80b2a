"""
Redis cache for slow external lookups.

Grid carbon intensity readings are cached per ~1 km grid cell so that nearby
callers share one upstream call. Every helper degrades to a miss when Redis
is disabled (empty REDIS_URL) or unreachable; callers never see a Redis error.
"""
import json
import logging
from typing import Any, Dict, Optional

import redis
from redis.exceptions import RedisError

from core.config import settings

logger = logging.getLogger(__name__)

GRID_INTENSITY_PREFIX = "grid_intensity"
GRID_CELL_DECIMALS = 2

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """Shared client, or None when Redis is disabled or down."""
    global _redis_client

    if _redis_client is not None:
        return _redis_client
    if not settings.REDIS_URL:
        return None

    try:
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
            health_check_interval=30,
        )
        client.ping()
    except RedisError as e:
        logger.warning(f"Redis unavailable: {e}. Caching and rate limiting disabled.")
        return None

    logger.info("Redis connection established")
    _redis_client = client
    return _redis_client


def grid_cell_key(latitude: float, longitude: float) -> str:
    """Key for the grid cell containing (latitude, longitude)."""
    return (
        f"{GRID_INTENSITY_PREFIX}:"
        f"{latitude:.{GRID_CELL_DECIMALS}f}:{longitude:.{GRID_CELL_DECIMALS}f}"
    )


def read_json(key: str) -> Optional[Dict[str, Any]]:
    client = get_redis_client()
    if client is None:
        return None

    try:
        raw = client.get(key)
    except RedisError as e:
        logger.warning(f"Cache read failed for {key}: {e}")
        return None
    if not raw:
        return None

    try:
        return json.loads(raw)
    except ValueError:
        logger.warning(f"Discarding unreadable cache entry {key}")
        return None


def write_json(key: str, value: Dict[str, Any], ttl: Optional[int] = None) -> bool:
    client = get_redis_client()
    if client is None:
        return False

    try:
        client.setex(key, ttl or settings.CACHE_TTL_DEFAULT, json.dumps(value, default=str))
    except RedisError as e:
        logger.warning(f"Cache write failed for {key}: {e}")
        return False
    return True

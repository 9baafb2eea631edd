import json
import redis
import structlog
from typing import Optional, Any
from ..config import settings

logger = structlog.get_logger(__name__)

COURSES_KEY = "courses:all"

_redis_client: Optional[redis.Redis] = None

def get_redis() -> Optional[redis.Redis]:
    """Shared client, or None when no REDIS_URL is configured."""
    global _redis_client
    if not settings.REDIS_URL:
        return None
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True
        )
    return _redis_client

def get_cache(key: str) -> Optional[Any]:
    try:
        client = get_redis()
        if client is None:
            return None
        value = client.get(key)
        if value:
            return json.loads(value)
    except Exception as e:
        # Redis is optional, a failure is just a miss
        logger.warning("cache_get_failed", key=key, error=str(e))
    return None

def set_cache(key: str, value: Any, ttl: int = None) -> bool:
    try:
        client = get_redis()
        if client is None:
            return False
        ttl = ttl or settings.CACHE_TTL
        client.setex(key, ttl, json.dumps(value, ensure_ascii=False))
        return True
    except Exception as e:
        logger.warning("cache_set_failed", key=key, error=str(e))
        return False

def delete_cache(key: str) -> bool:
    try:
        client = get_redis()
        if client is None:
            return False
        client.delete(key)
        return True
    except Exception as e:
        logger.warning("cache_delete_failed", key=key, error=str(e))
        return False

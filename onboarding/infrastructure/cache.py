import json
import redis
from typing import Optional, Any
from ..config import settings

_redis_client: Optional[redis.Redis] = None

def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=settings.DB_TIMEOUT_SECONDS,
            socket_timeout=settings.DB_TIMEOUT_SECONDS,
            retry_on_timeout=True
        )
    return _redis_client

def get_cache(key: str) -> Optional[Any]:
    """Получить значение из кэша"""
    try:
        client = get_redis()
        value = client.get(key)
        if value:
            return json.loads(value)
    except Exception:
        # Если Redis недоступен, просто возвращаем None
        pass
    return None

def set_cache(key: str, value: Any, ttl: int = None) -> bool:
    """Сохранить значение в кэш"""
    try:
        client = get_redis()
        ttl = ttl or settings.SESSION_CACHE_TTL
        client.setex(key, ttl, json.dumps(value, ensure_ascii=False))
        return True
    except Exception:
        # Если Redis недоступен, просто игнорируем
        return False

def delete_cache(key: str) -> bool:
    """Удалить значение из кэша"""
    try:
        client = get_redis()
        client.delete(key)
        return True
    except Exception:
        return False


class RedisSessionCache:
    """Кэш снимков сессии поверх Redis."""

    def get(self, key: str) -> Optional[Any]: return get_cache(key)
    def set(self, key: str, value: Any, ttl: int = None) -> bool: return set_cache(key, value, ttl)
    def delete(self, key: str) -> bool: return delete_cache(key)


def get_session_cache() -> RedisSessionCache:
    return RedisSessionCache()

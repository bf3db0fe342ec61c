import redis

from linkhub.core.config import settings


def get_redis_client() -> redis.Redis:
    """
    Creates a Redis client using REDIS_URL.
    decode_responses=True returns str instead of bytes.
    """
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)

# apps/crawler/rate_limit.py

import logging
import time

import redis
from django.conf import settings

logger = logging.getLogger(__name__)


def get_redis_client() -> redis.Redis:
    redis_url = getattr(settings, "REDIS_URL", "redis://localhost:6379/0")
    return redis.from_url(redis_url)


class DomainThrottle:
    """
    Politeness throttle shared by every worker fetching from the same host.

    Sliding window in a Redis sorted set: one member per request, scored by
    its timestamp. Fails open when Redis is unavailable.
    """

    window_seconds = 60

    def __init__(self, requests_per_minute: int | None = None, redis_client: redis.Redis | None = None):
        self.requests_per_minute = requests_per_minute or getattr(
            settings, "LEADMAILER_FETCH_REQUESTS_PER_MINUTE", 30
        )
        self.redis = redis_client or get_redis_client()

    @staticmethod
    def _key(domain: str) -> str:
        return f"fetch-throttle:{domain.lower()}"

    def seconds_until_allowed(self, domain: str) -> float:
        key = self._key(domain)
        now = time.time()

        try:
            self.redis.zremrangebyscore(key, 0, now - self.window_seconds)
            if self.redis.zcard(key) < self.requests_per_minute:
                return 0.0
            oldest = self.redis.zrange(key, 0, 0, withscores=True)
        except redis.RedisError as e:
            logger.error(f"Redis error in fetch throttle: {e}")
            return 0.0

        if not oldest:
            return 0.0
        return max(0.0, oldest[0][1] + self.window_seconds - now)

    def record(self, domain: str) -> None:
        key = self._key(domain)
        now = time.time()
        try:
            pipe = self.redis.pipeline()
            pipe.zadd(key, {f"{now}": now})
            pipe.zremrangebyscore(key, 0, now - self.window_seconds)
            pipe.expire(key, self.window_seconds * 2)
            pipe.execute()
        except redis.RedisError as e:
            logger.error(f"Redis error recording fetch: {e}")

    def wait(self, domain: str) -> float:
        """Block until a request to ``domain`` is allowed, then count it."""
        delay = self.seconds_until_allowed(domain)
        if delay > 0:
            logger.debug(f"Throttled on {domain}, waiting {delay:.2f}s")
            time.sleep(delay)
        self.record(domain)
        return delay

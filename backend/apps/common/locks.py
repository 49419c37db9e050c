# apps/common/locks.py

import logging
import uuid
from contextlib import contextmanager

from django.core.cache import cache

logger = logging.getLogger(__name__)


@contextmanager
def sweep_lock(name: str, timeout: int = 30 * 60):
    """
    Non-blocking lock that keeps overlapping runs of the same sweep apart.

    Yields True when this run owns the lock, False when a previous run of the
    same kind still holds it. ``cache.add`` only sets a missing key, which is
    atomic on the Redis backend. The timeout bounds how long a crashed worker
    can keep the lock.
    """
    key = f"sweep-lock:{name}"
    token = uuid.uuid4().hex
    acquired = cache.add(key, token, timeout)

    if not acquired:
        logger.info(f"Sweep {name} already running, skipping")

    try:
        yield acquired
    finally:
        # Only release a lock we own; it may have expired and been re-taken
        if acquired and cache.get(key) == token:
            cache.delete(key)

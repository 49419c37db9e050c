# apps/common/retry.py


def backoff_countdown(retries: int, base: float = 60.0, factor: float = 2.0, cap: float = 3600.0) -> int:
    """Seconds to wait before retry number ``retries + 1``."""
    return int(min(cap, base * (factor ** retries)))


def retries_exhausted(task) -> bool:
    """True when a bound Celery task is on its last allowed attempt."""
    max_retries = task.max_retries
    if max_retries is None:
        return False
    return task.request.retries >= max_retries

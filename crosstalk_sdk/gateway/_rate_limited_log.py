"""
Rate-limited logging for repeated gateway failures.

A relay that keeps rejecting requests produces the same reply failure over
and over; each distinct message is logged at most once per interval.
"""
import logging
import threading
from typing import Dict, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

# One cache per interval, since a TTLCache has a single TTL
_log_caches: Dict[int, TTLCache] = {}
_log_cache_lock = threading.RLock()

MAX_TRACKED_MESSAGES = 100


def _cache_for(interval: int) -> TTLCache:
    cache = _log_caches.get(interval)
    if cache is None:
        cache = TTLCache(maxsize=MAX_TRACKED_MESSAGES, ttl=interval)
        _log_caches[interval] = cache
    return cache


def rate_limited_log(
    message: str,
    level: str = "warning",
    interval: int = 60,
    logger_instance: Optional[logging.Logger] = None
) -> bool:
    """
    Log a message unless the same message was logged within ``interval``.

    Args:
        message: Message to log
        level: Log level (debug, info, warning, error, critical)
        interval: Minimum interval between identical logs in seconds
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        True if the message was logged, False if it was suppressed
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    key = f"{level}:{message}"

    with _log_cache_lock:
        cache = _cache_for(interval)
        if key in cache:
            return False
        log_method(message)
        cache[key] = True
    return True


def reset_rate_limits() -> None:
    """Forget every logged message."""
    with _log_cache_lock:
        _log_caches.clear()

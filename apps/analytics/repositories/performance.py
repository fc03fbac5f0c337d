# apps/analytics/repositories/performance.py
from functools import wraps
import time
import logging

logger = logging.getLogger(__name__)

SLOW_QUERY_SECONDS = 1.0


def monitor_query_performance(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.monotonic()
        result = func(*args, **kwargs)
        execution_time = time.monotonic() - start_time

        if execution_time > SLOW_QUERY_SECONDS:
            logger.warning(f"Slow rollup query: {func.__name__} took {execution_time:.2f}s")
        else:
            logger.debug(f"{func.__name__} took {execution_time * 1000:.0f}ms")

        return result
    return wrapper

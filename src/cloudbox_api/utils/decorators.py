"""Timing decorator for service operations."""
import functools
import logging
import time
from typing import Any, Callable, TypeVar, cast

from cloudbox_api.errors import CloudBoxError

logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def log_execution_time(func: F) -> F:
    """Log how long an operation took and whether it failed.

    Rejections of the caller's request (4xx errors) are logged at INFO;
    everything else that escapes is logged at ERROR and re-raised.
    """
    operation = func.__qualname__

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except CloudBoxError as e:
            elapsed = time.perf_counter() - started
            level = logging.INFO if e.status_code < 500 else logging.ERROR
            logger.log(level, f"{operation} rejected after {elapsed:.3f}s: {e}")
            raise
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.error(f"{operation} failed after {elapsed:.3f}s: {str(e)}")
            raise
        logger.info(f"{operation} completed in {time.perf_counter() - started:.3f}s")
        return result
    return cast(F, wrapper)

"""Caller-side retry for transient collaborator failures."""
from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from .exceptions import TransientError

logger = logging.getLogger("app.retry")

T = TypeVar("T")


def with_retry(func: Callable[[], T], max_retries: int = 3, initial_delay: float = 0.05) -> T:
    """Call `func`, retrying on TransientError with exponential backoff.

    Args:
        func: zero-argument callable, usually a lambda around a repo call
        max_retries: total attempts, including the first
        initial_delay: seconds to wait after the first failure

    Any other exception propagates immediately. After the last attempt the
    TransientError is re-raised.
    """
    delay = initial_delay
    for attempt in range(max_retries):
        try:
            return func()
        except TransientError as e:
            if attempt < max_retries - 1:
                logger.warning(
                    f"Transient error on attempt {attempt + 1}/{max_retries}: {e}. Retrying in {delay}s..."
                )
                time.sleep(delay)
                delay *= 2
            else:
                logger.error(f"Failed after {max_retries} attempts: {e}")
                raise
    raise RuntimeError("max_retries must be at least 1")


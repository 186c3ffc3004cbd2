"""
Task polling and retry helpers

``poll_task`` drives any server-side task to a terminal state. Callers supply
a ``fetch_status`` callable that performs one status request and translates
the response into a ``TaskStatus``; the translation is where the package
management and service task protocols differ.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .constants import RETRY_COUNT, RETRY_DELAY_SECONDS
from .exceptions import TaskFailedError, TimeoutExhaustedError

module_logger = logging.getLogger(__name__)

PENDING = 'PENDING'
RUNNING = 'RUNNING'
FINISHED = 'FINISHED'
FAILED = 'FAILED'


@dataclass
class TaskStatus:
    state: str
    result: Any = None
    error: Optional[str] = None


def poll_task(fetch_status: Callable[[], TaskStatus], max_attempts=RETRY_COUNT,
              delay=RETRY_DELAY_SECONDS, sleep=time.sleep, description='task', logger=None):
    """Poll until the task finishes, fails or the attempt budget is spent

    Returns the result of the FINISHED status. Raises ``TaskFailedError`` on
    FAILED and ``TimeoutExhaustedError`` when no terminal state was reached.
    Errors raised by ``fetch_status`` propagate unchanged.
    """
    logger = logger or module_logger
    last_state = None

    for attempt in range(1, max_attempts + 1):
        status = fetch_status()
        last_state = status.state

        if status.state == FINISHED:
            logger.debug("%s finished after %d attempt(s)", description, attempt)
            return status.result
        if status.state == FAILED:
            raise TaskFailedError(f"{description} failed: {status.error}", error_message=status.error)

        logger.debug("%s state %s (attempt %d/%d)", description, status.state, attempt, max_attempts)
        if attempt < max_attempts:
            sleep(delay)

    raise TimeoutExhaustedError(description, max_attempts, last_state)


def retrier(func, *args, max_retries=RETRY_COUNT, retry_interval=RETRY_DELAY_SECONDS,
            sleep=time.sleep, logger=None, **kwargs):
    """Call ``func`` until it returns without raising

    The last exception is re-raised once ``max_retries`` attempts have failed.
    """
    logger = logger or module_logger
    last_error = None

    attempts = max(max_retries, 1)
    for attempt in range(1, attempts + 1):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            last_error = e
            logger.debug("Attempt %d/%d of %s failed: %s",
                         attempt, attempts, getattr(func, '__name__', func), e)
            if attempt < attempts:
                sleep(retry_interval)

    raise last_error

"""Thread-based background worker with retries and dead-lettering.

Booking and registration notifications are sent from here. SMTP delivery is
slow and flaky, and a booking is already committed by the time its emails go
out, so delivery runs on a small thread pool. It is retried with exponential
backoff, and anything that still fails is kept in ``dead_letter_queue`` for
inspection. None of this reaches the request that triggered it.
"""

from __future__ import annotations

import logging
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from collections import deque
from typing import Any, Callable, Dict, Tuple

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="bg-worker")
_tasks: Dict[str, Future] = {}
# Dead-letter queue storing failed jobs for later inspection
# Each entry: (function name, args, kwargs, exception)
dead_letter_queue: deque[Tuple[str, tuple, dict, Exception]] = deque(maxlen=500)


def _run_with_retry(
    func: Callable[..., Any], *args: Any, retries: int = 3, backoff: float = 1, **kwargs: Any
) -> Any:
    """Execute ``func`` with retry and exponential backoff."""

    for attempt in range(1, retries + 1):
        try:
            return func(*args, **kwargs)
        except Exception as exc:
            logger.error(
                "Background task %s failed on attempt %s/%s: %s", func.__name__, attempt, retries, exc
            )
            if attempt == retries:
                dead_letter_queue.append((func.__name__, args, kwargs, exc))
                raise
            time.sleep(backoff * (2 ** (attempt - 1)))


def enqueue(
    func: Callable[..., Any], *args: Any, retries: int = 3, backoff: float = 1, **kwargs: Any
) -> str:
    """Submit ``func`` to the worker and return a task id."""

    task_id = str(uuid.uuid4())
    future = _executor.submit(_run_with_retry, func, *args, retries=retries, backoff=backoff, **kwargs)
    _tasks[task_id] = future
    future.add_done_callback(lambda _f: _tasks.pop(task_id, None))
    return task_id


def wait(task_id: str, timeout: float | None = None) -> Any:
    """Block until ``task_id`` finishes; returns None if it already completed."""

    future = _tasks.get(task_id)
    if future is None:
        return None
    return future.result(timeout=timeout)

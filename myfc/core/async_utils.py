"""Async helper utilities."""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


def consume_task_exception(task: asyncio.Future) -> None:
    """Done-callback that marks a shared task's exception as retrieved.

    Shared tasks are awaited through ``asyncio.shield``; when every waiter has been
    cancelled nobody reads the result and asyncio would warn at garbage collection.
    """
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("shared_task_failed", extra={"error": str(exc)})

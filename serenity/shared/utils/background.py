"""Detached background work.

Side effects that must never delay or fail a request (wellness summary
refresh) are submitted here. Errors are logged, never re-raised, and no
ordering between jobs is guaranteed.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Thread pool for fire-and-forget jobs."""

    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="serenity-bg",
        )
        logger.info("BACKGROUND_TASKS_INITIALIZED", extra={"max_workers": max_workers})

    def submit(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Run fn(*args, **kwargs) off the request path.

        Args:
            name: Job name used in log events
            fn: Callable to run

        Returns:
            The Future, for callers (tests) that want to wait on it
        """
        future = self._executor.submit(fn, *args, **kwargs)
        future.add_done_callback(lambda f: self._report(name, f))
        return future

    def _report(self, name: str, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error(
                "BACKGROUND_TASK_FAILED",
                extra={
                    "task": name,
                    "error": str(error),
                    "error_type": type(error).__name__,
                }
            )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
        logger.info("BACKGROUND_TASKS_SHUTDOWN")

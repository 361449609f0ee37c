"""
Review Worker Pool

Runs detached review tasks inside the API process. Callers hand over a
coroutine factory and get nothing back to wait on; a run's outcome is only
observable through its persisted Review row.

Nothing is persisted about queued work: tasks still waiting or running when
the process dies are lost.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Set

from src.utils.logging import get_logger

logger = get_logger(__name__)


class WorkerPoolClosedError(RuntimeError):
    """Raised when work is submitted after shutdown started."""


class ReviewWorkerPool:
    def __init__(self, max_concurrency: int = 4):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def active_count(self) -> int:
        """Tasks submitted and not finished yet, including those waiting for a slot."""
        return len(self._tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, job: Callable[[], Awaitable[None]], name: Optional[str] = None) -> asyncio.Task:
        """Schedule ``job()`` on the running loop under the concurrency limit."""
        if self._closed:
            raise WorkerPoolClosedError("Review worker pool is shut down")

        task = asyncio.get_running_loop().create_task(self._run(job, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def _run(self, job: Callable[[], Awaitable[None]], name: Optional[str]) -> None:
        async with self._semaphore:
            logger.debug(f"Worker slot acquired for {name or 'task'}")
            await job()

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning(f"Review task {task.get_name()} was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Review task {task.get_name()} failed: {exc}",
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def drain(self) -> None:
        """Wait until every submitted task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self, timeout: float = 30.0) -> None:
        """Stop accepting work, wait up to ``timeout`` seconds, cancel the rest."""
        self._closed = True
        if not self._tasks:
            return

        logger.info(f"Waiting for {len(self._tasks)} review tasks to finish")
        done, pending = await asyncio.wait(list(self._tasks), timeout=timeout)

        if pending:
            logger.warning(f"Cancelling {len(pending)} review tasks still running at shutdown")
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

"""Cancellable debounce timer for asyncio callbacks."""
import asyncio
from collections.abc import Awaitable, Callable

import structlog

logger = structlog.get_logger(__name__)


class Debouncer:
    """
    Run an async callback once input has been quiet for ``delay`` seconds.

    Scheduling again while the timer is pending cancels the pending run.
    Once the delay elapses the callback is no longer cancellable through
    ``schedule``; it finishes and its caller decides whether the result is
    still current.
    """

    def __init__(self, delay: float):
        self.delay = delay
        self._timer: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a scheduled callback is still waiting for its delay."""
        return self._timer is not None and not self._timer.done()

    def schedule(self, callback: Callable[[], Awaitable[None]]) -> asyncio.Task:
        """
        Schedule ``callback`` after the delay, superseding any pending run.

        Must be called from inside a running event loop.
        """
        self.cancel()
        task = asyncio.create_task(self._run(callback))
        self._timer = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, callback: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(self.delay)
        # Past this point the run is firing, not pending
        if self._timer is asyncio.current_task():
            self._timer = None
        await callback()

    def cancel(self) -> bool:
        """Cancel the pending run, if any. Returns True when one was cancelled."""
        if not self.pending:
            return False
        self._timer.cancel()
        self._timer = None
        logger.debug("debounce_cancelled")
        return True

    async def wait(self) -> None:
        """Wait for every scheduled run, including one still in its delay."""
        while self._tasks:
            done, _ = await asyncio.wait(set(self._tasks))
            for task in done:
                if not task.cancelled():
                    task.result()

    async def shutdown(self) -> None:
        """Cancel everything, including runs already firing."""
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.wait(set(self._tasks))
        self._timer = None

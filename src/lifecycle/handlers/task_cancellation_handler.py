from __future__ import annotations
import asyncio
from typing import List

from lifecycle.shutdown_protocol import IShutdownHandler
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)

class TaskCancellationHandler(IShutdownHandler):
    """
    Shutdown handler for asyncio tasks.

    Cancels whatever is still running and awaits it, so no task outlives
    the event loop.

    Priority: 40
    """

    def __init__(self, tasks: List[asyncio.Task]):
        """
        Args:
            tasks: List of asyncio.Task objects to cancel
        """
        self.tasks = tasks

    @property
    def shutdown_priority(self) -> int:
        """Tasks are cancelled after the guard was asked to stop."""
        return 40

    async def shutdown(self) -> None:
        """Cancel and await all tasks."""
        pending = [task for task in self.tasks if not task.done()]
        if not pending:
            log.debug("No background tasks left to cancel")
            return

        log.info(f"Cancelling {len(pending)} background task(s)...")
        for task in pending:
            task.cancel()
            log.debug(f"Cancelled task: {task.get_name()}")

        # Either complete or raise CancelledError
        await asyncio.gather(*pending, return_exceptions=True)
        log.debug("All tasks cancelled")

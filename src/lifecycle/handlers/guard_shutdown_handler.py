from __future__ import annotations
import asyncio
from typing import Optional, TYPE_CHECKING

from lifecycle.shutdown_protocol import IShutdownHandler
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from controllers.guard_controller import GuardController

log = get_logger().for_category(LogCategory.SHUTDOWN)


class GuardShutdownHandler(IShutdownHandler):
    """
    Stops the guard loop.

    The loop wakes from its poll / settle wait immediately; lights are left
    as they are. If the loop task does not finish within grace_period it is
    left to TaskCancellationHandler.

    Priority: 100 (shutdown first)
    """

    def __init__(self, controller: "GuardController", task: Optional[asyncio.Task] = None, grace_period: float = 2.0):
        self.controller = controller
        self.task = task
        self.grace_period = grace_period

    @property
    def shutdown_priority(self) -> int:
        return 100

    async def shutdown(self) -> None:
        log.info("Stopping guard loop...")
        self.controller.stop()

        if self.task is None or self.task.done():
            return

        done, _ = await asyncio.wait({self.task}, timeout=self.grace_period)
        if not done:
            log.warn("Guard loop did not stop in time", grace_period=self.grace_period)

"""
Shutdown coordinator that orchestrates graceful shutdown of all components.

Manages signal handlers, watches the critical tasks (the guard loop) and runs
the registered shutdown handlers in priority order.
"""

import asyncio
import signal
from typing import List, Optional, Set

from lifecycle.shutdown_protocol import IShutdownHandler
from lifecycle.task_registry import TaskCategory, TaskRegistry
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SYSTEM)

# A finished task in any of these categories ends the application
CRITICAL_CATEGORIES: Set[TaskCategory] = {TaskCategory.GUARD}


class ShutdownCoordinator:
    """
    Coordinates graceful shutdown of multiple components.

    Example:
        coordinator = ShutdownCoordinator()
        coordinator.register(GuardShutdownHandler(controller))
        coordinator.register(TaskCancellationHandler([guard_task]))
        coordinator.register(GatewayShutdownHandler(gateway))

        coordinator.setup_signal_handlers(loop)
        await coordinator.wait_for_shutdown()
        await coordinator.shutdown_all()
    """

    def __init__(
        self,
        timeout_per_handler: float = 5.0,
        total_timeout: float = 15.0,
        registry: Optional[TaskRegistry] = None
    ):
        """
        Args:
            timeout_per_handler: Timeout for each individual handler (seconds)
            total_timeout: Total timeout for entire shutdown sequence (seconds)
            registry: Task registry to watch (defaults to the singleton)
        """
        self._handlers: List[IShutdownHandler] = []
        self._shutdown_event = asyncio.Event()
        self._timeout_per_handler = timeout_per_handler
        self._total_timeout = total_timeout
        self._registry = registry
        self.reason: Optional[str] = None

    @property
    def registry(self) -> TaskRegistry:
        return self._registry or TaskRegistry.instance()

    def register(self, handler: IShutdownHandler) -> None:
        """
        Register a shutdown handler.

        Handler must have:
        - shutdown_priority property (int)
        - async shutdown() method
        """
        if not hasattr(handler, "shutdown_priority"):
            raise ValueError(f"Handler {handler} missing shutdown_priority property")
        if not hasattr(handler, "shutdown"):
            raise ValueError(f"Handler {handler} missing shutdown() method")

        self._handlers.append(handler)
        log.debug(f"Registered shutdown handler: {handler.__class__.__name__}")

    def setup_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """Install SIGINT (Ctrl+C) and SIGTERM handlers that trigger shutdown."""
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: self.request_shutdown(f"Signal {s.name}"))

        log.info("Signal handlers installed (SIGINT, SIGTERM)")

    def request_shutdown(self, reason: str) -> None:
        if self.reason is None:
            self.reason = reason
            log.info(f"{reason} → triggering shutdown")
        self._shutdown_event.set()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_event.is_set()

    @property
    def shutdown_event(self) -> asyncio.Event:
        """Set once shutdown was requested; lets startup steps bail out early."""
        return self._shutdown_event

    def _critical_tasks(self) -> List[asyncio.Task]:
        return [
            r.task for r in self.registry.active()
            if r.info.category in CRITICAL_CATEGORIES
        ]

    def _finished_critical_tasks(self) -> List[asyncio.Task]:
        return [
            r.task for r in self.registry.list_all()
            if r.info.category in CRITICAL_CATEGORIES and r.task.done()
        ]

    def _describe_finished(self, task: asyncio.Task) -> str:
        record = self.registry.get_record(task)
        name = record.info.description if record else task.get_name()
        if task.cancelled():
            return f"Task cancelled: {name}"
        if task.exception() is not None:
            return f"Task failure: {name}"
        return f"Task finished: {name}"

    async def wait_for_shutdown(self) -> None:
        """
        Wait until a shutdown is requested or a critical task ends.

        A critical task ending for whatever reason (error, clean return,
        cancellation) leaves nothing to guard, so it shuts the app down too.
        """
        while not self._shutdown_event.is_set():
            finished = self._finished_critical_tasks()
            if finished:
                self.request_shutdown(self._describe_finished(finished[0]))
                return

            critical_tasks = self._critical_tasks()
            shutdown_waiter = asyncio.ensure_future(self._shutdown_event.wait())
            try:
                done, _ = await asyncio.wait(
                    {shutdown_waiter, *critical_tasks},
                    return_when=asyncio.FIRST_COMPLETED
                )
            finally:
                if not shutdown_waiter.done():
                    shutdown_waiter.cancel()

            for task in done:
                if task is not shutdown_waiter:
                    self.request_shutdown(self._describe_finished(task))
                    break

    async def shutdown_all(self) -> None:
        """
        Execute graceful shutdown of all handlers in priority order.

        Handlers are called in descending priority order (highest first).
        A failing or hanging handler is logged and the sequence continues.
        """
        log.info("🛑 Initiating graceful shutdown sequence...")
        log.info(f"   Reason: {self.reason or 'UNKNOWN'}")

        sorted_handlers = sorted(self._handlers, key=lambda h: h.shutdown_priority, reverse=True)

        loop = asyncio.get_running_loop()
        start_time = loop.time()

        for handler in sorted_handlers:
            handler_name = handler.__class__.__name__

            elapsed = loop.time() - start_time
            if elapsed > self._total_timeout:
                log.error(f"⚠️  Total shutdown timeout exceeded ({elapsed:.1f}s > {self._total_timeout}s)")
                break

            try:
                log.debug(f"Shutting down {handler_name} (priority={handler.shutdown_priority})...")
                await asyncio.wait_for(handler.shutdown(), timeout=self._timeout_per_handler)
                log.debug(f"✓ {handler_name} shutdown complete")

            except asyncio.TimeoutError:
                log.error(f"⚠️  {handler_name} shutdown timeout ({self._timeout_per_handler}s)")

            except Exception as e:
                # Continue with other handlers even if one fails
                log.error(f"❌ Error shutting down {handler_name}: {e}", exc_info=True)

        log.info("✓ Shutdown sequence complete")
        log.debug(self.registry.summary())

    def get_handler(self, handler_type: type):
        """Get a registered handler by type (testing / debugging)."""
        for handler in self._handlers:
            if isinstance(handler, handler_type):
                return handler
        return None

"""
Shutdown coordinator: signal-style requests, guard task monitoring and
handler ordering.
"""

import asyncio
import contextlib

import pytest

from controllers.guard_controller import GuardController
from hardware.bridge.gateway_mock import MockDeviceGateway
from lifecycle.handlers import GatewayShutdownHandler, GuardShutdownHandler, TaskCancellationHandler
from lifecycle.shutdown_coordinator import ShutdownCoordinator
from lifecycle.task_registry import create_tracked_task, TaskCategory


class RecordingHandler:
    def __init__(self, name, priority, log, fail=False, hang=False):
        self.name = name
        self.priority = priority
        self.log = log
        self.fail = fail
        self.hang = hang

    @property
    def shutdown_priority(self):
        return self.priority

    async def shutdown(self):
        self.log.append(self.name)
        if self.hang:
            await asyncio.sleep(60)
        if self.fail:
            raise RuntimeError("handler failed")


@pytest.mark.asyncio
async def test_wait_for_shutdown_returns_on_request():
    coordinator = ShutdownCoordinator()

    async def dummy_task():
        while True:
            await asyncio.sleep(0.1)

    task = create_tracked_task(dummy_task(), category=TaskCategory.GUARD, description="Dummy guard")
    asyncio.get_running_loop().call_later(0.05, coordinator.request_shutdown, "Signal SIGINT")

    try:
        await asyncio.wait_for(coordinator.wait_for_shutdown(), timeout=2.0)
        assert coordinator.reason == "Signal SIGINT"
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


@pytest.mark.asyncio
async def test_wait_for_shutdown_returns_on_guard_failure():
    coordinator = ShutdownCoordinator()

    async def failing_task():
        await asyncio.sleep(0.05)
        raise RuntimeError("Simulated guard failure")

    task = create_tracked_task(failing_task(), category=TaskCategory.GUARD, description="Guard loop")

    await asyncio.wait_for(coordinator.wait_for_shutdown(), timeout=2.0)

    assert coordinator.reason == "Task failure: Guard loop"
    with contextlib.suppress(RuntimeError):
        await task


@pytest.mark.asyncio
async def test_already_finished_guard_triggers_shutdown():
    coordinator = ShutdownCoordinator()

    async def quick():
        return None

    task = create_tracked_task(quick(), category=TaskCategory.GUARD, description="Guard loop")
    await task

    await asyncio.wait_for(coordinator.wait_for_shutdown(), timeout=1.0)
    assert coordinator.reason == "Task finished: Guard loop"


@pytest.mark.asyncio
async def test_non_critical_task_does_not_trigger_shutdown():
    coordinator = ShutdownCoordinator()

    async def quick():
        return None

    await create_tracked_task(quick(), category=TaskCategory.REGISTRATION, description="Registration")

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(coordinator.wait_for_shutdown(), timeout=0.1)


@pytest.mark.asyncio
async def test_handlers_run_by_priority_and_survive_failures():
    calls = []
    coordinator = ShutdownCoordinator(timeout_per_handler=0.05)
    coordinator.register(RecordingHandler("low", 10, calls))
    coordinator.register(RecordingHandler("high", 100, calls, fail=True))
    coordinator.register(RecordingHandler("mid", 40, calls, hang=True))

    await coordinator.shutdown_all()

    assert calls == ["high", "mid", "low"]


def test_register_rejects_incomplete_handler():
    with pytest.raises(ValueError):
        ShutdownCoordinator().register(object())


@pytest.mark.asyncio
async def test_full_guard_shutdown_sequence(make_controller):
    gateway = MockDeviceGateway({"A": True, "B": False})
    controller: GuardController = make_controller(gateway, poll_interval=60.0)
    await controller.initialize()

    guard_task = create_tracked_task(controller.run(), category=TaskCategory.GUARD, description="Guard loop")

    coordinator = ShutdownCoordinator()
    coordinator.register(GuardShutdownHandler(controller, guard_task))
    coordinator.register(TaskCancellationHandler([guard_task]))
    coordinator.register(GatewayShutdownHandler(gateway))
    assert isinstance(coordinator.get_handler(GuardShutdownHandler), GuardShutdownHandler)

    await asyncio.sleep(0.02)
    coordinator.request_shutdown("Signal SIGTERM")
    await coordinator.wait_for_shutdown()
    await coordinator.shutdown_all()

    assert guard_task.done() and not guard_task.cancelled()
    assert controller.stop_requested
    assert gateway.closed
    assert gateway.commands == []

import asyncio

import pytest

from hardware.bridge.gateway_mock import MockDeviceGateway
from models.enums import AnomalyState
from models.errors import NoBaselineAvailableError


async def wait_until(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


# ---------------------------------------------------------------------------
# Startup precondition
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_startup_with_all_lights_on_fails(make_controller, tracker):
    controller = make_controller(MockDeviceGateway({"A": True, "B": True}))

    with pytest.raises(NoBaselineAvailableError):
        await controller.initialize()

    assert not tracker.has_baseline


@pytest.mark.asyncio
async def test_run_never_starts_loop_when_all_lights_on(make_controller):
    gateway = MockDeviceGateway({"A": True, "B": True})
    controller = make_controller(gateway)

    with pytest.raises(NoBaselineAvailableError):
        await controller.run()

    assert gateway.list_calls == 1
    assert gateway.commands == []
    assert not controller.is_running


@pytest.mark.asyncio
async def test_startup_snapshot_becomes_baseline(make_controller, tracker):
    controller = make_controller(MockDeviceGateway({"A": True, "B": False}))

    snapshot = await controller.initialize()

    assert snapshot == {"A": True, "B": False}
    assert tracker.current().snapshot == {"A": True, "B": False}


# ---------------------------------------------------------------------------
# Single ticks
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_normal_poll_refreshes_baseline(make_controller, tracker, clock):
    gateway = MockDeviceGateway({"A": True, "B": False})
    controller = make_controller(gateway)
    await controller.initialize()

    gateway.set_lights({"A": False, "B": False})
    assert await controller.poll_once() is AnomalyState.NORMAL

    assert tracker.current().snapshot == {"A": False, "B": False}
    assert tracker.current().captured_at == clock.now


@pytest.mark.asyncio
async def test_poll_failure_keeps_baseline_and_next_tick_recovers(make_controller, tracker, clock):
    gateway = MockDeviceGateway({"A": True, "B": False})
    controller = make_controller(gateway)
    await controller.initialize()
    before = tracker.current()

    gateway.fail_next_list()
    clock.advance(10)
    assert await controller.poll_once() is None
    assert tracker.current() is before

    gateway.set_lights({"A": False, "B": False})
    assert await controller.poll_once() is AnomalyState.NORMAL
    assert tracker.current().snapshot == {"A": False, "B": False}


@pytest.mark.asyncio
async def test_anomaly_restores_baseline(make_controller, gateway):
    controller = make_controller(gateway)
    await controller.initialize()

    gateway.trigger_fault()
    assert await controller.poll_once() is AnomalyState.ANOMALOUS

    assert gateway.commands == [
        (frozenset({"B"}), False),
        (frozenset({"A", "C"}), True),
    ]
    assert gateway.lights == {"A": True, "B": False, "C": True}
    assert controller.last_restoration.succeeded


@pytest.mark.asyncio
async def test_anomalous_poll_does_not_touch_baseline(make_controller, gateway, tracker, clock):
    controller = make_controller(gateway)
    await controller.initialize()
    before = tracker.current()

    gateway.fail_next_command(times=2)
    gateway.trigger_fault()
    clock.advance(60)
    await controller.poll_once()

    assert tracker.current() is before


# ---------------------------------------------------------------------------
# Consecutive anomalies
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_consecutive_anomalies_retry_until_cap(make_controller, gateway):
    controller = make_controller(gateway, max_restore_attempts=2)
    await controller.initialize()

    # Commands are lost: lights stay all on
    gateway.fail_next_command(times=100)
    gateway.trigger_fault()

    for _ in range(5):
        await controller.poll_once()

    # two restorations, two commands each
    assert len(gateway.commands) == 4
    assert controller.restore_attempts == 2


@pytest.mark.asyncio
async def test_normal_snapshot_resets_restore_cap(make_controller, gateway):
    controller = make_controller(gateway, max_restore_attempts=1)
    await controller.initialize()

    gateway.fail_next_command(times=2)
    gateway.trigger_fault()
    await controller.poll_once()
    await controller.poll_once()
    assert len(gateway.commands) == 2

    gateway.set_lights({"A": True, "B": False, "C": False})
    await controller.poll_once()
    assert controller.restore_attempts == 0

    gateway.trigger_fault()
    await controller.poll_once()
    assert len(gateway.commands) == 4
    assert gateway.lights == {"A": True, "B": False, "C": False}


# ---------------------------------------------------------------------------
# Loop lifecycle
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_end_to_end_restore_then_refresh(make_controller, tracker, clock):
    gateway = MockDeviceGateway({"A": True, "B": False})
    controller = make_controller(gateway)
    task = asyncio.create_task(controller.run())

    await wait_until(lambda: controller.is_running)
    gateway.trigger_fault()
    await wait_until(lambda: len(gateway.commands) == 2)

    assert gateway.commands == [(frozenset({"B"}), False), (frozenset({"A"}), True)]
    assert gateway.lights == {"A": True, "B": False}

    # Baseline follows the user once the debounce window has elapsed
    clock.advance(5.0)
    gateway.set_lights({"A": False, "B": False})
    await wait_until(lambda: tracker.current().snapshot == {"A": False, "B": False})

    controller.stop()
    await asyncio.wait_for(task, timeout=1.0)
    assert not controller.is_running


@pytest.mark.asyncio
async def test_run_reports_timings(make_controller, capsys):
    gateway = MockDeviceGateway({"A": True, "B": False})
    controller = make_controller(gateway, settle_delay=2.5)
    task = asyncio.create_task(controller.run())
    await wait_until(lambda: controller.is_running)

    controller.stop()
    await asyncio.wait_for(task, timeout=1.0)

    out = capsys.readouterr().out
    assert "debounce_window: 5s" in out
    assert "settle_delay: 2.5s" in out


@pytest.mark.asyncio
async def test_poll_errors_do_not_stop_loop(make_controller):
    gateway = MockDeviceGateway({"A": True, "B": False})
    controller = make_controller(gateway)
    await controller.initialize()
    gateway.fail_next_list(times=3)

    task = asyncio.create_task(controller.run())
    await wait_until(lambda: gateway.list_calls >= 6)

    assert controller.is_running
    assert not task.done()

    controller.stop()
    await asyncio.wait_for(task, timeout=1.0)


@pytest.mark.asyncio
async def test_stop_interrupts_poll_interval(make_controller):
    gateway = MockDeviceGateway({"A": True, "B": False})
    controller = make_controller(gateway, poll_interval=60.0)
    task = asyncio.create_task(controller.run())
    await wait_until(lambda: gateway.list_calls == 2)

    controller.stop()
    await asyncio.wait_for(task, timeout=0.5)


@pytest.mark.asyncio
async def test_stop_during_settle_delay_sends_no_commands(make_controller, gateway):
    controller = make_controller(gateway, settle_delay=60.0)
    await controller.initialize()
    gateway.trigger_fault()

    task = asyncio.create_task(controller.run())
    await wait_until(lambda: gateway.list_calls == 2)
    await asyncio.sleep(0.02)

    controller.stop()
    await asyncio.wait_for(task, timeout=0.5)

    assert gateway.commands == []
    assert controller.last_restoration.aborted
    assert gateway.lights == {"A": True, "B": True, "C": True}


@pytest.mark.asyncio
async def test_cancel_during_settle_delay_ends_loop(make_controller, gateway):
    controller = make_controller(gateway, settle_delay=60.0)
    await controller.initialize()
    gateway.trigger_fault()

    task = asyncio.create_task(controller.run())
    await wait_until(lambda: gateway.list_calls == 2)
    await asyncio.sleep(0.02)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(task, timeout=0.5)

    assert gateway.commands == []
    assert not controller.is_running

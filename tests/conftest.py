import pytest

from controllers.guard_controller import GuardController
from hardware.bridge.gateway_mock import MockDeviceGateway
from lifecycle.task_registry import TaskRegistry
from services.anomaly_detector import AnomalyDetector
from services.baseline_tracker import BaselineTracker
from services.restoration_coordinator import RestorationCoordinator


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def fresh_task_registry():
    TaskRegistry.reset()
    yield
    TaskRegistry.reset()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def detector():
    return AnomalyDetector()


@pytest.fixture
def tracker(detector):
    return BaselineTracker(detector, debounce_window=5.0)


@pytest.fixture
def gateway():
    """A on, B off, C on"""
    return MockDeviceGateway({"A": True, "B": False, "C": True})


@pytest.fixture
def make_controller(detector, tracker, clock):
    """Controller with no settle delay and a short poll interval."""

    def _make(gateway, *, settle_delay=0.0, poll_interval=0.01, max_restore_attempts=3):
        return GuardController(
            gateway=gateway,
            detector=detector,
            tracker=tracker,
            coordinator=RestorationCoordinator(settle_delay=settle_delay),
            poll_interval=poll_interval,
            max_restore_attempts=max_restore_attempts,
            clock=clock
        )

    return _make

"""
GuardController - the polling control loop

Observing:
    every poll_interval seconds read all light states and classify them
    - NORMAL    -> let the baseline tracker refresh (debounced)
    - ANOMALOUS -> restore lights to the baseline, then keep observing

Startup refuses to run when every light is already on, because there is no
trustworthy state to restore to.

Consecutive anomalous polls may re-trigger restoration (a lost command pass
gets retried) but only max_restore_attempts times in a row. After that the
guard stands down until a normal snapshot is seen again, so a user who
really wants every light on is not overridden forever.

Both waits (poll interval and settle delay) wake immediately on stop() and
are plain asyncio sleeps, so cancelling the task ends the loop at once too.
No restore command is sent after a stop during the settle delay.
"""

import asyncio
import time
from typing import Callable, Optional

from hardware.bridge.gateway_interface import IDeviceGateway
from models.enums import AnomalyState
from models.errors import GatewayUnavailableError, NoBaselineAvailableError
from models.light_state import LightStateSnapshot
from services.anomaly_detector import AnomalyDetector
from services.baseline_tracker import BaselineTracker
from services.restoration_coordinator import RestorationCoordinator, RestorationResult
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.GUARD)


class GuardController:
    """
    Drives detector, tracker and coordinator against a single gateway.

    Example:
        controller = GuardController(gateway, detector, tracker, coordinator)
        task = asyncio.create_task(controller.run())
        ...
        controller.stop()
        await task
    """

    def __init__(
        self,
        gateway: IDeviceGateway,
        detector: AnomalyDetector,
        tracker: BaselineTracker,
        coordinator: RestorationCoordinator,
        poll_interval: float = 1.0,
        max_restore_attempts: int = 3,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            gateway: Bridge to poll and command
            detector: Snapshot classifier
            tracker: Owner of the baseline snapshot
            coordinator: Restoration command sequence
            poll_interval: Seconds between the end of one poll and the next
            max_restore_attempts: Restorations allowed on consecutive anomalous polls
            clock: Monotonic time source (seconds)
        """
        self.gateway = gateway
        self.detector = detector
        self.tracker = tracker
        self.coordinator = coordinator
        self.poll_interval = poll_interval
        self.max_restore_attempts = max_restore_attempts
        self._clock = clock

        self._stop_event = asyncio.Event()
        self._running = False
        self._initialized = False
        self._restore_attempts = 0
        self._suppression_logged = False
        self.last_restoration: Optional[RestorationResult] = None

    # -------------------------------
    # State
    # -------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def restore_attempts(self) -> int:
        """Restorations performed since the last normal snapshot"""
        return self._restore_attempts

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    # -------------------------------
    # Lifecycle
    # -------------------------------

    async def initialize(self) -> LightStateSnapshot:
        """
        Take the startup snapshot and make it the first baseline.

        Raises:
            NoBaselineAvailableError: every light is on at startup
            GatewayUnavailableError: the bridge could not be read
        """
        snapshot = await self.gateway.list_states()

        if self.detector.is_anomalous(snapshot):
            raise NoBaselineAvailableError(len(snapshot))

        self.tracker.initialize(snapshot, self._clock())
        self._initialized = True
        log.info("Guarding lights", lights=len(snapshot), on=len(snapshot.lights_on))
        return snapshot

    def stop(self) -> None:
        """Request the loop to end; waits in progress return immediately."""
        if not self._stop_event.is_set():
            log.info("Stop requested")
        self._stop_event.set()

    async def run(self) -> None:
        """Initialize if needed, then poll until stopped or cancelled."""
        if not self._initialized:
            await self.initialize()

        self._running = True
        log.info(
            f"Polling every {self.poll_interval:g}s",
            debounce_window=f"{self.tracker.debounce_window:g}s",
            settle_delay=f"{self.coordinator.settle_delay:g}s"
        )
        try:
            while not self._stop_event.is_set():
                await self.poll_once()
                if await self._wait(self.poll_interval):
                    break
        except asyncio.CancelledError:
            log.debug("Guard loop cancelled.")
            raise
        finally:
            self._running = False
            log.info("Guard loop stopped")

    # -------------------------------
    # One tick
    # -------------------------------

    async def poll_once(self) -> Optional[AnomalyState]:
        """
        Observe the lights once and react.

        Returns:
            The classification, or None when the poll failed
        """
        try:
            snapshot = await self.gateway.list_states()
        except GatewayUnavailableError as e:
            log.error(f"Failed to read light states: {e.message}", **e.details)
            return None

        state = self.detector.classify(snapshot)

        if state is AnomalyState.NORMAL:
            self._restore_attempts = 0
            self._suppression_logged = False
            self.tracker.refresh_if_due(snapshot, self._clock())
            return state

        await self._handle_anomaly(snapshot)
        return state

    async def _handle_anomaly(self, snapshot: LightStateSnapshot) -> None:
        if self._restore_attempts >= self.max_restore_attempts:
            if not self._suppression_logged:
                log.warn(
                    "All lights still on after restoring, leaving them as they are until a light is turned off",
                    attempts=self._restore_attempts
                )
                self._suppression_logged = True
            return

        self._restore_attempts += 1
        log.warn(
            "All lights on detected",
            lights=len(snapshot),
            attempt=f"{self._restore_attempts}/{self.max_restore_attempts}"
        )

        baseline = self.tracker.current()
        self.last_restoration = await self.coordinator.restore(baseline, self.gateway, sleep=self._wait)

    async def _wait(self, delay: float) -> bool:
        """Sleep for delay; True if stop() was called meanwhile."""
        if self._stop_event.is_set():
            return True
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False

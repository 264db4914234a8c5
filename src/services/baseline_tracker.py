"""
Baseline Tracker - owns the last known good light state

The baseline is only replaced by a normal snapshot, and only once the
debounce window since the previous capture has elapsed. Snapshots taken
while lights are still flipping into the fault would otherwise become the
state we restore to.
"""

from typing import Optional

from models.errors import NoBaselineError
from models.light_state import Baseline, LightStateSnapshot
from services.anomaly_detector import AnomalyDetector
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.STATE)


class BaselineTracker:
    """
    Debounced holder of the trusted baseline snapshot.

    Example:
        tracker = BaselineTracker(detector, debounce_window=5.0)
        tracker.initialize(first_snapshot, now=time.monotonic())

        # every normal poll
        tracker.refresh_if_due(snapshot, now=time.monotonic())

        # on anomaly
        baseline = tracker.current()
    """

    def __init__(self, detector: AnomalyDetector, debounce_window: float = 5.0):
        """
        Args:
            detector: Classifier used to refuse anomalous snapshots
            debounce_window: Minimum seconds between two baseline captures
        """
        self._detector = detector
        self._debounce_window = debounce_window
        self._baseline: Optional[Baseline] = None

    @property
    def debounce_window(self) -> float:
        return self._debounce_window

    @property
    def has_baseline(self) -> bool:
        return self._baseline is not None

    def initialize(self, snapshot: LightStateSnapshot, now: float) -> Baseline:
        """
        Store the startup snapshot as the first baseline.

        Its capture time is backdated by one debounce window so the very
        next normal snapshot may refresh it immediately.
        """
        self._baseline = Baseline(snapshot=snapshot, captured_at=now - self._debounce_window)
        log.info("Baseline initialized", lights=len(snapshot), on=len(snapshot.lights_on))
        return self._baseline

    def is_due(self, now: float) -> bool:
        if self._baseline is None:
            return True
        return now - self._baseline.captured_at >= self._debounce_window

    def refresh_if_due(self, snapshot: LightStateSnapshot, now: float) -> bool:
        """
        Replace the baseline with (snapshot, now) when allowed.

        Returns:
            True if the baseline was replaced
        """
        if not self.is_due(now):
            return False
        if self._detector.is_anomalous(snapshot):
            return False

        changed = self._baseline is None or self._baseline.snapshot != snapshot
        self._baseline = Baseline(snapshot=snapshot, captured_at=now)
        if changed:
            log.debug("Baseline refreshed", lights=len(snapshot), on=len(snapshot.lights_on))
        return True

    def current(self) -> Baseline:
        if self._baseline is None:
            raise NoBaselineError()
        return self._baseline

"""Services layer"""

from .anomaly_detector import AnomalyDetector
from .baseline_tracker import BaselineTracker
from .restoration_coordinator import RestorationCoordinator, RestorationResult

__all__ = [
    "AnomalyDetector",
    "BaselineTracker",
    "RestorationCoordinator",
    "RestorationResult",
]

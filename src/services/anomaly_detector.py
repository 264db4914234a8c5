"""Anomaly Detector - classifies light snapshots"""

from models.enums import AnomalyState
from models.light_state import LightStateSnapshot


class AnomalyDetector:
    """
    Stateless classifier for the "every light switched on" fault.

    Any light reported off proves the fault has not happened. An empty
    snapshot carries no evidence either way and is treated as normal.
    """

    @staticmethod
    def classify(snapshot: LightStateSnapshot) -> AnomalyState:
        if len(snapshot) > 0 and all(snapshot.values()):
            return AnomalyState.ANOMALOUS
        return AnomalyState.NORMAL

    def is_anomalous(self, snapshot: LightStateSnapshot) -> bool:
        return self.classify(snapshot) is AnomalyState.ANOMALOUS

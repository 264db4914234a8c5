import pytest

from models.enums import AnomalyState
from models.light_state import LightStateSnapshot
from services.anomaly_detector import AnomalyDetector


@pytest.mark.parametrize("states, expected", [
    ({}, AnomalyState.NORMAL),
    ({"A": False}, AnomalyState.NORMAL),
    ({"A": True}, AnomalyState.ANOMALOUS),
    ({"A": True, "B": True, "C": True}, AnomalyState.ANOMALOUS),
    ({"A": True, "B": False, "C": True}, AnomalyState.NORMAL),
    ({"A": False, "B": False}, AnomalyState.NORMAL),
])
def test_classify(states, expected):
    assert AnomalyDetector.classify(LightStateSnapshot(states)) is expected


def test_is_anomalous_helper():
    detector = AnomalyDetector()
    assert detector.is_anomalous(LightStateSnapshot({"A": True, "B": True}))
    assert not detector.is_anomalous(LightStateSnapshot({"A": True, "B": False}))
    assert not detector.is_anomalous(LightStateSnapshot({}))

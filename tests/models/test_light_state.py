import pytest

from models.light_state import Baseline, LightStateSnapshot


def test_snapshot_is_a_read_only_mapping():
    source = {"1": True, "2": False}
    snapshot = LightStateSnapshot(source)

    source["1"] = False  # later changes to the source do not leak in

    assert snapshot["1"] is True
    assert dict(snapshot.items()) == {"1": True, "2": False}
    with pytest.raises(TypeError):
        snapshot.states["1"] = False


def test_snapshot_equality_and_hash():
    a = LightStateSnapshot({"1": True, "2": False})
    b = LightStateSnapshot({"2": False, "1": True})

    assert a == b
    assert hash(a) == hash(b)
    assert a == {"1": True, "2": False}
    assert a != LightStateSnapshot({"1": True, "2": True})


def test_snapshot_partitions():
    snapshot = LightStateSnapshot({"A": True, "B": False, "C": True})

    assert set(snapshot.lights_on) == {"A", "C"}
    assert snapshot.lights_off == ("B",)


def test_snapshot_values_are_coerced_to_bool():
    snapshot = LightStateSnapshot({"1": 1, "2": 0})
    assert snapshot.to_dict() == {"1": True, "2": False}


def test_baseline_is_frozen():
    baseline = Baseline(LightStateSnapshot({"1": False}), captured_at=3.0)
    with pytest.raises(AttributeError):
        baseline.captured_at = 4.0

"""Light state domain models"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Hashable, Iterator, Mapping, Tuple

LightId = Hashable


@dataclass(frozen=True)
class LightStateSnapshot(Mapping):
    """
    Immutable point-in-time view of every light's on/off state.

    Keys are the light identifiers reported by the bridge at capture time,
    values are True when the light is on.
    """
    states: Mapping[LightId, bool] = field(default_factory=dict)

    def __post_init__(self):
        frozen = MappingProxyType({k: bool(v) for k, v in dict(self.states).items()})
        object.__setattr__(self, "states", frozen)

    def __getitem__(self, light_id: LightId) -> bool:
        return self.states[light_id]

    def __iter__(self) -> Iterator[LightId]:
        return iter(self.states)

    def __len__(self) -> int:
        return len(self.states)

    def __eq__(self, other) -> bool:
        if isinstance(other, LightStateSnapshot):
            return dict(self.states) == dict(other.states)
        if isinstance(other, Mapping):
            return dict(self.states) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self.states.items()))

    def __repr__(self) -> str:
        return f"LightStateSnapshot({dict(self.states)!r})"

    @property
    def lights_on(self) -> Tuple[LightId, ...]:
        return tuple(k for k, v in self.states.items() if v)

    @property
    def lights_off(self) -> Tuple[LightId, ...]:
        return tuple(k for k, v in self.states.items() if not v)

    def to_dict(self) -> Dict[LightId, bool]:
        return dict(self.states)


@dataclass(frozen=True)
class Baseline:
    """Last trusted snapshot and the monotonic time it was captured at"""
    snapshot: LightStateSnapshot
    captured_at: float

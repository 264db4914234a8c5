# hardware/bridge/gateway_interface.py
"""
IDeviceGateway Protocol
========================
Boundary between the guard and whatever actually talks to the lights.

Both calls may fail with GatewayUnavailableError. apply_command may have
reached some lights and not others when it fails; callers treat the call
as a whole.
"""

from __future__ import annotations
from typing import Iterable, Protocol

from models.light_state import LightId, LightStateSnapshot


class IDeviceGateway(Protocol):

    async def list_states(self) -> LightStateSnapshot:
        """Read the on/off state of every light known to the bridge."""
        ...

    async def apply_command(self, ids: Iterable[LightId], on: bool) -> None:
        """Switch the given lights on or off. Empty ids is a no-op."""
        ...

    async def close(self) -> None:
        """Release transport resources."""
        ...

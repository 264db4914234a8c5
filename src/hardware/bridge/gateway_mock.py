from typing import Dict, Iterable, List, Optional, Tuple

from models.errors import GatewayUnavailableError
from models.light_state import LightId, LightStateSnapshot
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.BRIDGE)


class MockDeviceGateway:
    """In-memory bridge: lights are a dict, commands mutate it and are recorded."""

    def __init__(self, lights: Optional[Dict[LightId, bool]] = None):
        self._lights: Dict[LightId, bool] = dict(lights or {})
        self.commands: List[Tuple[frozenset, bool]] = []
        self.list_calls = 0
        self.closed = False
        self._fail_list = 0
        # [remaining, when_on] pairs, consumed in the order they were queued
        self._command_failures: List[List] = []
        log.info("Mock gateway initialized", lights=len(self._lights))

    # -------------------------------
    # Simulation
    # -------------------------------

    @property
    def lights(self) -> Dict[LightId, bool]:
        return dict(self._lights)

    def set_lights(self, lights: Dict[LightId, bool]) -> None:
        self._lights = dict(lights)

    def trigger_fault(self) -> None:
        """Simulate the bridge switching every light on."""
        for light_id in self._lights:
            self._lights[light_id] = True

    def fail_next_list(self, times: int = 1) -> None:
        self._fail_list += times

    def fail_next_command(self, times: int = 1, when_on: Optional[bool] = None) -> None:
        """
        Fail upcoming apply_command calls, optionally only those with on == when_on.

        Calls stack: each keeps its own count and filter, and a command is
        failed by the oldest pending entry whose filter matches it.
        """
        if times > 0:
            self._command_failures.append([times, when_on])

    def _take_command_failure(self, on: bool) -> bool:
        for entry in self._command_failures:
            if entry[1] in (None, on):
                entry[0] -= 1
                if entry[0] == 0:
                    self._command_failures.remove(entry)
                return True
        return False

    # -------------------------------
    # IDeviceGateway
    # -------------------------------

    async def list_states(self) -> LightStateSnapshot:
        self.list_calls += 1
        if self._fail_list:
            self._fail_list -= 1
            raise GatewayUnavailableError("Simulated poll failure")
        return LightStateSnapshot(self._lights)

    async def apply_command(self, ids: Iterable[LightId], on: bool) -> None:
        ids = frozenset(ids)
        self.commands.append((ids, on))
        if self._take_command_failure(on):
            raise GatewayUnavailableError("Simulated command failure", details={"on": on})
        for light_id in ids:
            if light_id in self._lights:
                self._lights[light_id] = on

    async def close(self) -> None:
        self.closed = True

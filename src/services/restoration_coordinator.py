"""
Restoration Coordinator - puts every light back to its baseline state

Sequence:
1. wait the settle delay so the bridge finishes propagating the fault
2. split the baseline into lights that were off and lights that were on
3. command the off-set first, then the on-set

Each command phase is attempted independently. A failed phase is logged
and reported in the result, it never prevents the other phase and never
raises; the next poll re-observes the lights anyway.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from hardware.bridge.gateway_interface import IDeviceGateway
from models.errors import GatewayUnavailableError
from models.light_state import Baseline
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.RESTORE)

# Returns True when the wait was interrupted and restoration must not proceed
SleepFn = Callable[[float], Awaitable[Optional[bool]]]


@dataclass(frozen=True)
class RestorationResult:
    """Outcome of one restore() call"""
    aborted: bool = False
    off_applied: bool = False
    on_applied: bool = False
    off_count: int = 0
    on_count: int = 0

    @property
    def succeeded(self) -> bool:
        return not self.aborted and self.off_applied and self.on_applied


class RestorationCoordinator:

    def __init__(self, settle_delay: float = 5.0, sleep: SleepFn = asyncio.sleep):
        """
        Args:
            settle_delay: Seconds to wait before issuing corrective commands
            sleep: Awaitable delay; a truthy result aborts the restoration
        """
        self._settle_delay = settle_delay
        self._sleep = sleep

    @property
    def settle_delay(self) -> float:
        return self._settle_delay

    async def restore(
        self,
        baseline: Baseline,
        gateway: IDeviceGateway,
        sleep: Optional[SleepFn] = None
    ) -> RestorationResult:
        """
        Restore all lights to the baseline snapshot.

        Args:
            baseline: Last trusted state
            gateway: Bridge to send commands through
            sleep: Overrides the constructor sleep for this call (lets the
                   control loop make the settle delay interruptible)
        """
        log.info(f"All lights on detected, waiting {self._settle_delay:g} seconds for the bridge to settle down")
        interrupted = await (sleep or self._sleep)(self._settle_delay)
        if interrupted:
            log.info("Restoration aborted during settle delay")
            return RestorationResult(aborted=True)

        snapshot = baseline.snapshot
        was_off = frozenset(snapshot.lights_off)
        was_on = frozenset(snapshot.lights_on)

        log.info(
            "Resetting to previous state",
            previously_on=len(was_on),
            previously_off=len(was_off)
        )

        off_applied = await self._apply_phase(gateway, was_off, on=False)
        on_applied = await self._apply_phase(gateway, was_on, on=True)

        return RestorationResult(
            off_applied=off_applied,
            on_applied=on_applied,
            off_count=len(was_off),
            on_count=len(was_on)
        )

    async def _apply_phase(self, gateway: IDeviceGateway, ids: frozenset, on: bool) -> bool:
        phase = "on" if on else "off"
        try:
            await gateway.apply_command(ids, on=on)
        except GatewayUnavailableError as e:
            log.error(f"Failed to turn lights {phase}: {e.message}", lights=len(ids), **e.details)
            return False
        log.debug(f"Turned {len(ids)} lights {phase}")
        return True

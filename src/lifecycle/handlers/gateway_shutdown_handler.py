from __future__ import annotations
from typing import TYPE_CHECKING

from lifecycle.shutdown_protocol import IShutdownHandler
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from hardware.bridge.gateway_interface import IDeviceGateway

log = get_logger().for_category(LogCategory.SHUTDOWN)


class GatewayShutdownHandler(IShutdownHandler):
    """
    Closes the bridge gateway transport.

    Priority: 10 (shutdown last, nothing talks to the bridge anymore)
    """

    def __init__(self, gateway: "IDeviceGateway"):
        self.gateway = gateway

    @property
    def shutdown_priority(self) -> int:
        return 10

    async def shutdown(self) -> None:
        log.info("Closing bridge connection...")
        await self.gateway.close()
        log.debug("Bridge connection closed")

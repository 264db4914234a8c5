"""
Bridge Locator

Finds the bridge address: a configured static address wins, otherwise the
vendor discovery endpoint is asked and the first bridge listed is used.
"""

from typing import List, Optional

import httpx
from pydantic import ValidationError

from models.errors import BridgeNotFoundError, GatewayUnavailableError
from models.hue import DiscoveredBridge, DiscoveryResponse
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.BRIDGE)


class BridgeLocator:

    def __init__(
        self,
        discovery_url: str = "https://discovery.meethue.com",
        static_address: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.discovery_url = discovery_url
        self.static_address = static_address
        self._client = client

    async def discover(self, timeout: float = 5.0) -> List[DiscoveredBridge]:
        """Query the discovery endpoint for every bridge on the local network."""
        client = self._client or httpx.AsyncClient(timeout=timeout)
        try:
            response = await client.get(self.discovery_url, timeout=timeout)
            response.raise_for_status()
            return DiscoveryResponse.model_validate(response.json()).root
        except httpx.HTTPError as e:
            raise GatewayUnavailableError(
                "Bridge discovery failed",
                details={"url": self.discovery_url, "error": str(e) or type(e).__name__}
            ) from e
        except (ValueError, ValidationError) as e:
            raise GatewayUnavailableError(
                "Bridge discovery returned an invalid response",
                details={"url": self.discovery_url}
            ) from e
        finally:
            if self._client is None:
                await client.aclose()

    async def locate(self, timeout: float = 5.0) -> str:
        """
        Returns:
            Address of the bridge to bind to

        Raises:
            BridgeNotFoundError: discovery listed no bridge
            GatewayUnavailableError: discovery endpoint unreachable
        """
        if self.static_address:
            log.info("Using configured bridge address", address=self.static_address)
            return self.static_address

        bridges = await self.discover(timeout)
        if not bridges:
            raise BridgeNotFoundError(self.discovery_url)

        bridge = bridges[0]
        log.info("Bridge found", address=bridge.internalipaddress, id=bridge.id, total=len(bridges))
        return bridge.internalipaddress

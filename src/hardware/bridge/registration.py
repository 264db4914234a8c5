"""
Bridge Registration

Obtains an application key from the bridge. The bridge only hands one out
within a short window after its physical link button was pressed, so
registration is a polling operation: attempt, and while the bridge answers
"link button not pressed", wait and attempt again until it succeeds, the
task is cancelled or the stop event is set.
"""

import asyncio
from typing import Optional

import httpx
from pydantic import ValidationError

from models.errors import GatewayUnavailableError, LinkButtonNotPressedError, RegistrationError
from models.hue import HueResultList, LINK_BUTTON_NOT_PRESSED
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.BRIDGE)

# Repeat the "press the button" reminder every N attempts
REMINDER_EVERY = 30


class BridgeRegistrar:

    def __init__(
        self,
        address: str,
        app_name: str,
        device_name: str,
        request_timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.address = address
        self.device_type = f"{app_name}#{device_name}"
        self._client = client or httpx.AsyncClient(timeout=request_timeout)
        self._owns_client = client is None

    async def register_once(self) -> str:
        """
        Single registration attempt.

        Raises:
            LinkButtonNotPressedError: bridge is waiting for the link button
            RegistrationError: bridge refused for any other reason
            GatewayUnavailableError: bridge unreachable / unusable answer
        """
        url = f"http://{self.address}/api"
        try:
            response = await self._client.post(url, json={"devicetype": self.device_type})
            response.raise_for_status()
            result = HueResultList.model_validate(response.json())
        except httpx.HTTPError as e:
            raise GatewayUnavailableError(
                "Registration request failed",
                details={"address": self.address, "error": str(e) or type(e).__name__}
            ) from e
        except (ValueError, ValidationError) as e:
            raise GatewayUnavailableError(
                "Registration returned an invalid response",
                details={"address": self.address}
            ) from e

        errors = result.errors()
        if errors:
            if errors[0].type == LINK_BUTTON_NOT_PRESSED:
                raise LinkButtonNotPressedError()
            raise RegistrationError(errors[0].description, details={"error_type": errors[0].type})

        for item in result.root:
            if item.success and item.success.get("username"):
                return item.success["username"]

        raise RegistrationError("Bridge response did not contain an app key")

    async def wait_for_registration(
        self,
        retry_interval: float = 1.0,
        stop_event: Optional[asyncio.Event] = None
    ) -> Optional[str]:
        """
        Poll register_once() until the bridge issues a key.

        Returns:
            The app key, or None if stop_event was set before registration completed
        """
        log.info(
            f"Registering new client '{self.device_type}', ensure that link button is pressed on the bridge",
            address=self.address
        )

        attempt = 0
        while True:
            if stop_event is not None and stop_event.is_set():
                log.info("Registration stopped before the link button was pressed")
                return None

            attempt += 1
            try:
                app_key = await self.register_once()
                log.info("Got app key", attempts=attempt)
                return app_key
            except LinkButtonNotPressedError:
                if attempt % REMINDER_EVERY == 0:
                    log.info("Still waiting for the link button to be pressed", attempts=attempt)
            except GatewayUnavailableError as e:
                log.warn(f"Registration attempt failed, retrying: {e.message}", **e.details)

            if await self._wait(retry_interval, stop_event):
                log.info("Registration stopped before the link button was pressed")
                return None

    @staticmethod
    async def _wait(delay: float, stop_event: Optional[asyncio.Event]) -> bool:
        """Sleep for delay; True if the stop event fired meanwhile."""
        if stop_event is None:
            await asyncio.sleep(delay)
            return False
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

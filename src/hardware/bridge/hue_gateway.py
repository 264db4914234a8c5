# hardware/bridge/hue_gateway.py
"""
HueGateway
==========
IDeviceGateway over the bridge's local REST API (v1) using httpx.

- GET  /api/<app_key>/lights              -> every light with its state
- PUT  /api/<app_key>/lights/<id>/state   -> {"on": true|false}

Every transport or payload problem surfaces as GatewayUnavailableError.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from models.errors import GatewayUnavailableError
from models.hue import HueLightsResponse, HueResultList
from models.light_state import LightId, LightStateSnapshot
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.BRIDGE)


class HueGateway:

    def __init__(
        self,
        address: str,
        app_key: str,
        request_timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Args:
            address: Bridge IP or host name
            app_key: Registered application key
            request_timeout: Per-request timeout in seconds
            client: Preconfigured client (tests inject one with a MockTransport)
        """
        self.address = address
        self._app_key = app_key
        self._client = client or httpx.AsyncClient(timeout=request_timeout)
        self._base_url = f"http://{address}/api/{app_key}"
        log.info("Hue gateway ready", address=address)

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise GatewayUnavailableError(
                f"{method} {path} failed",
                details={"error": str(e) or type(e).__name__}
            ) from e
        except ValueError as e:
            # Non-JSON body
            raise GatewayUnavailableError(
                f"{method} {path} returned invalid JSON",
                details={"error": str(e)}
            ) from e

    @staticmethod
    def _raise_for_bridge_errors(path: str, payload: Any) -> None:
        """The bridge reports errors as a 200 with a list of {"error": ...}"""
        if not isinstance(payload, list):
            return
        try:
            errors = HueResultList.model_validate(payload).errors()
        except ValidationError:
            return
        if errors:
            first = errors[0]
            raise GatewayUnavailableError(
                f"Bridge rejected {path}: {first.description}",
                details={"error_type": first.type}
            )

    async def list_states(self) -> LightStateSnapshot:
        payload = await self._request("GET", "/lights")
        self._raise_for_bridge_errors("/lights", payload)

        try:
            lights = HueLightsResponse.model_validate(payload).root
        except ValidationError as e:
            raise GatewayUnavailableError(
                "Malformed lights payload",
                details={"error": str(e).splitlines()[0]}
            ) from e

        return LightStateSnapshot({light_id: light.state.on for light_id, light in lights.items()})

    async def apply_command(self, ids: Iterable[LightId], on: bool) -> None:
        failed: List[LightId] = []
        last_error: Optional[GatewayUnavailableError] = None

        for light_id in sorted(ids, key=str):
            path = f"/lights/{light_id}/state"
            try:
                payload = await self._request("PUT", path, json={"on": on})
                self._raise_for_bridge_errors(path, payload)
            except GatewayUnavailableError as e:
                failed.append(light_id)
                last_error = e

        if last_error is not None:
            raise GatewayUnavailableError(
                f"Could not switch {len(failed)} light(s) {'on' if on else 'off'}",
                details={"failed": ", ".join(str(i) for i in failed), "error": last_error.message}
            ) from last_error

    async def close(self) -> None:
        await self._client.aclose()
        log.debug("Hue gateway closed")

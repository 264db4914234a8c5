# factory.py

from typing import Optional

from hardware.bridge.gateway_interface import IDeviceGateway
from hardware.bridge.gateway_mock import MockDeviceGateway
from hardware.bridge.hue_gateway import HueGateway
from models.config import BridgeConfig


def create_gateway(
    config: BridgeConfig,
    *,
    address: Optional[str] = None,
    app_key: Optional[str] = None,
) -> IDeviceGateway:
    """
    Real bridge unless the config asks for the in-memory one.
    """
    if config.mock:
        return MockDeviceGateway(config.mock_lights)

    address = address or config.address
    app_key = app_key or config.app_key
    if not address or not app_key:
        raise ValueError("Bridge address and app key are required for a real gateway")

    return HueGateway(
        address=address,
        app_key=app_key,
        request_timeout=config.request_timeout
    )

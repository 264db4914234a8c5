from .gateway_interface import IDeviceGateway
from .hue_gateway import HueGateway
from .gateway_mock import MockDeviceGateway
from .gateway_factory import create_gateway
from .bridge_locator import BridgeLocator
from .registration import BridgeRegistrar


__all__ = [
    "IDeviceGateway",
    "HueGateway",
    "MockDeviceGateway",
    "create_gateway",
    "BridgeLocator",
    "BridgeRegistrar",
]

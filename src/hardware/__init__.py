"""
Hardware Layer

Low-level access to the physical lights:

- Bridge gateway (IDeviceGateway, HueGateway, MockDeviceGateway)
- Bridge discovery and registration
"""
from .bridge import (
    IDeviceGateway,
    HueGateway,
    MockDeviceGateway,
    create_gateway,
    BridgeLocator,
    BridgeRegistrar,
)

__all__ = [
    "IDeviceGateway",
    "HueGateway",
    "MockDeviceGateway",
    "create_gateway",
    "BridgeLocator",
    "BridgeRegistrar",
]

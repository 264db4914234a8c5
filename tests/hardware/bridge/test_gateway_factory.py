import pytest

from hardware.bridge.gateway_factory import create_gateway
from hardware.bridge.gateway_mock import MockDeviceGateway
from hardware.bridge.hue_gateway import HueGateway
from models.config import BridgeConfig


def test_mock_config_builds_mock_gateway():
    gateway = create_gateway(BridgeConfig(mock=True, mock_lights={"1": True, "2": False}))

    assert isinstance(gateway, MockDeviceGateway)
    assert gateway.lights == {"1": True, "2": False}


@pytest.mark.asyncio
async def test_real_gateway_uses_discovered_address_and_key():
    gateway = create_gateway(BridgeConfig(), address="10.0.0.9", app_key="k")

    assert isinstance(gateway, HueGateway)
    assert gateway.address == "10.0.0.9"
    await gateway.close()


def test_real_gateway_requires_key():
    with pytest.raises(ValueError):
        create_gateway(BridgeConfig(address="10.0.0.9"))

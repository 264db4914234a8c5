"""
Bridge payload schemas - Pydantic models for the bridge REST API (v1)

Only the fields the guard needs are declared, everything else the bridge
sends (brightness, color, capabilities...) is ignored.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel


class HueLightStatePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    on: bool
    reachable: Optional[bool] = None


class HueLightPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    state: HueLightStatePayload
    name: Optional[str] = None


class HueLightsResponse(RootModel[Dict[str, HueLightPayload]]):
    """GET /api/<key>/lights -> {"1": {...}, "2": {...}}"""


class HueErrorPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: int
    address: Optional[str] = None
    description: str = ""


class HueResultItem(BaseModel):
    """One element of the list the bridge answers POST/PUT requests with"""
    model_config = ConfigDict(extra="ignore")

    success: Optional[dict] = None
    error: Optional[HueErrorPayload] = None


class HueResultList(RootModel[List[HueResultItem]]):

    def errors(self) -> List[HueErrorPayload]:
        return [item.error for item in self.root if item.error is not None]


class DiscoveredBridge(BaseModel):
    """One entry of the discovery endpoint response"""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    internalipaddress: str = Field(min_length=1)
    port: Optional[int] = None


class DiscoveryResponse(RootModel[List[DiscoveredBridge]]):
    pass


# Error type the bridge returns while the link button has not been pressed
LINK_BUTTON_NOT_PRESSED = 101

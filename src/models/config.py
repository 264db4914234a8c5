"""
Configuration models - Pydantic models for config.yaml sections

Sections:
- bridge: where the bridge lives and how to talk to it
- guard: timing policy of the polling loop
- registration: link-button polling
- logging: logger level and colors
"""

import socket
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field


class BridgeConfig(BaseModel):
    """Bridge connection settings"""
    address: Optional[str] = Field(
        None,
        description="Bridge IP/host; discovered when empty"
    )
    app_key: Optional[str] = Field(
        None,
        description="Registered application key (username)"
    )
    app_name: str = Field("hueguard", min_length=1)
    device_name: str = Field(default_factory=socket.gethostname)
    discovery_url: str = "https://discovery.meethue.com"
    discovery_timeout: float = Field(5.0, gt=0)
    request_timeout: float = Field(5.0, gt=0)

    # In-memory gateway for dry runs without a bridge
    mock: bool = False
    mock_lights: Dict[str, bool] = Field(default_factory=dict)


class GuardConfig(BaseModel):
    """Polling loop timing policy (seconds)"""
    poll_interval: float = Field(1.0, gt=0)
    debounce_window: float = Field(5.0, ge=0)
    settle_delay: float = Field(5.0, ge=0)
    max_restore_attempts: int = Field(
        3,
        ge=1,
        description="Restorations allowed on consecutive anomalous polls"
    )


class RegistrationConfig(BaseModel):
    retry_interval: float = Field(1.0, gt=0)


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = "INFO"
    colors: bool = True


class AppConfig(BaseModel):
    """Root of the merged YAML configuration"""
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    guard: GuardConfig = Field(default_factory=GuardConfig)
    registration: RegistrationConfig = Field(default_factory=RegistrationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

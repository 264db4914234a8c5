"""
Models package - Data models for the light guard
"""

from .enums import AnomalyState, LogLevel, LogCategory
from .light_state import LightId, LightStateSnapshot, Baseline
from .errors import (
    HueGuardError,
    ConfigError,
    GatewayUnavailableError,
    NoBaselineError,
    NoBaselineAvailableError,
    BridgeNotFoundError,
    LinkButtonNotPressedError,
    RegistrationError,
)

__all__ = [
    'AnomalyState',
    'LogLevel',
    'LogCategory',
    'LightId',
    'LightStateSnapshot',
    'Baseline',
    'HueGuardError',
    'ConfigError',
    'GatewayUnavailableError',
    'NoBaselineError',
    'NoBaselineAvailableError',
    'BridgeNotFoundError',
    'LinkButtonNotPressedError',
    'RegistrationError',
]

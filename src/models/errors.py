"""
Domain errors

Every error carries a stable code, a human readable message and an
optional details dict that ends up as detail lines in the log output.
"""

from typing import Optional


class HueGuardError(Exception):
    """Base class for domain-specific errors"""
    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(HueGuardError):
    """Configuration could not be loaded or validated"""
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(code="CONFIG_INVALID", message=message, details=details)


class GatewayUnavailableError(HueGuardError):
    """Bridge could not be reached or returned an unusable response"""
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(code="GATEWAY_UNAVAILABLE", message=message, details=details)


class NoBaselineError(HueGuardError):
    """Baseline requested before one was ever stored"""
    def __init__(self):
        super().__init__(
            code="NO_BASELINE",
            message="Baseline has not been initialized"
        )


class NoBaselineAvailableError(HueGuardError):
    """All lights are on at startup, there is no state to guard"""
    def __init__(self, light_count: int):
        super().__init__(
            code="NO_BASELINE_AVAILABLE",
            message="All lights are currently on, so there is no previous state to guard. "
                    "Turn a light off and try again!",
            details={"light_count": light_count}
        )


class BridgeNotFoundError(HueGuardError):
    """Discovery did not return any bridge"""
    def __init__(self, discovery_url: str):
        super().__init__(
            code="BRIDGE_NOT_FOUND",
            message="No bridge found!",
            details={"discovery_url": discovery_url}
        )


class LinkButtonNotPressedError(HueGuardError):
    """Registration attempted before the bridge link button was pressed"""
    def __init__(self):
        super().__init__(
            code="LINK_BUTTON_NOT_PRESSED",
            message="Link button not pressed"
        )


class RegistrationError(HueGuardError):
    """Bridge rejected the registration request"""
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(code="REGISTRATION_FAILED", message=message, details=details)

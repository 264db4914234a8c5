"""
Enums for the light guard
"""

from enum import Enum, auto


class AnomalyState(Enum):
    """
    Classification of a single light snapshot

    NORMAL: at least one light is off (or no lights are known)
    ANOMALOUS: every known light reports on at the same time
    """
    NORMAL = auto()
    ANOMALOUS = auto()


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, validation
    BRIDGE = auto()      # Discovery, registration, HTTP transport
    GUARD = auto()       # Polling loop, anomaly detection
    RESTORE = auto()     # Restoration command sequence
    STATE = auto()       # Baseline capture / refresh
    SYSTEM = auto()      # Startup, shutdown, errors

    SHUTDOWN = auto()
    LIFECYCLE = auto()
    TASK = auto()

    GENERAL = auto()    # Default general category

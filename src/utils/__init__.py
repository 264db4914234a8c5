"""
Utility functions for the light guard
"""

from .logger import get_logger, configure_logger

__all__ = [
    'get_logger',
    'configure_logger',
]

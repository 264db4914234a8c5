from .guard_controller import GuardController

__all__ = [
    'GuardController',
]

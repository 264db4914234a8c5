from .guard_shutdown_handler import GuardShutdownHandler
from .gateway_shutdown_handler import GatewayShutdownHandler
from .task_cancellation_handler import TaskCancellationHandler

__all__ = [
    "GuardShutdownHandler",
    "GatewayShutdownHandler",
    "TaskCancellationHandler",
]

"""
main_asyncio.py — Application entry point for HueGuard
------------------------------------------------------

Responsible for:
- loading configuration and configuring the logger
- locating the bridge and obtaining an app key (link-button registration)
- wiring dependencies (Dependency Injection)
- starting the guard loop
- graceful shutdown on Ctrl+C, SIGTERM or a guard loop failure
"""

import sys

# ---------------------------------------------------------------------------
# UTF-8 ENCODING FIX (important for Raspberry Pi)
# ---------------------------------------------------------------------------

# Set UTF-8 encoding for output BEFORE anything logs (fixes Unicode symbol rendering)
if hasattr(sys.stdout, 'reconfigure') and sys.stdout.encoding != 'UTF-8':
    sys.stdout.reconfigure(encoding='utf-8')  # type: ignore
if hasattr(sys.stderr, 'reconfigure') and sys.stderr.encoding != 'UTF-8':
    sys.stderr.reconfigure(encoding='utf-8')  # type: ignore

import asyncio
from typing import Optional

from utils.logger import get_logger, configure_logger

from models.config import AppConfig
from models.enums import LogCategory
from models.errors import HueGuardError
from managers import ConfigManager
from hardware.bridge import BridgeLocator, BridgeRegistrar, IDeviceGateway, create_gateway
from services import AnomalyDetector, BaselineTracker, RestorationCoordinator
from controllers import GuardController

# === Lifecycle Management ===
from lifecycle import ShutdownCoordinator
from lifecycle.handlers import GatewayShutdownHandler, GuardShutdownHandler, TaskCancellationHandler
from lifecycle.task_registry import create_tracked_task, TaskCategory

# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------

log = get_logger().for_category(LogCategory.SYSTEM)


# ---------------------------------------------------------------------------
# BRIDGE CONNECTION
# ---------------------------------------------------------------------------

async def connect_gateway(
    config: AppConfig,
    config_manager: ConfigManager,
    stop_event: asyncio.Event
) -> Optional[IDeviceGateway]:
    """
    Locate the bridge, make sure we hold an app key and build the gateway.

    Returns None if shutdown was requested while waiting for the link button.
    """
    bridge = config.bridge
    if bridge.mock:
        log.info("Using in-memory mock gateway")
        return create_gateway(bridge)

    locator = BridgeLocator(discovery_url=bridge.discovery_url, static_address=bridge.address)
    address = await locator.locate(timeout=bridge.discovery_timeout)

    app_key = bridge.app_key
    if not app_key:
        log.info("No app key found in config")
        registrar = BridgeRegistrar(
            address=address,
            app_name=bridge.app_name,
            device_name=bridge.device_name,
            request_timeout=bridge.request_timeout
        )
        try:
            app_key = await registrar.wait_for_registration(
                retry_interval=config.registration.retry_interval,
                stop_event=stop_event
            )
        finally:
            await registrar.close()

        if app_key is None:
            return None
        config_manager.save_app_key(app_key)

    return create_gateway(bridge, address=address, app_key=app_key)


# ---------------------------------------------------------------------------
# Application Entry
# ---------------------------------------------------------------------------

async def main() -> int:
    """Main async entry point (dependency injection and event loop startup)."""

    # ========================================================================
    # 1. CONFIGURATION
    # ========================================================================

    config_manager = ConfigManager()
    config = config_manager.load()
    configure_logger(config_manager.log_level, use_colors=config.logging.colors)

    log.info("Starting HueGuard...")

    coordinator = ShutdownCoordinator()
    coordinator.setup_signal_handlers(asyncio.get_running_loop())

    # ========================================================================
    # 2. BRIDGE
    # ========================================================================

    gateway = await connect_gateway(config, config_manager, coordinator.shutdown_event)
    if gateway is None:
        log.info("👋 HueGuard stopped before it was registered.")
        return 0
    coordinator.register(GatewayShutdownHandler(gateway))

    # ========================================================================
    # 3. GUARD
    # ========================================================================

    guard = config.guard
    detector = AnomalyDetector()
    controller = GuardController(
        gateway=gateway,
        detector=detector,
        tracker=BaselineTracker(detector, debounce_window=guard.debounce_window),
        coordinator=RestorationCoordinator(settle_delay=guard.settle_delay),
        poll_interval=guard.poll_interval,
        max_restore_attempts=guard.max_restore_attempts
    )

    try:
        await controller.initialize()
    except HueGuardError as e:
        log.error(f"ERROR: {e.message}", **e.details)
        await coordinator.shutdown_all()
        return 1

    guard_task = create_tracked_task(
        controller.run(),
        category=TaskCategory.GUARD,
        description="Guard loop"
    )

    coordinator.register(GuardShutdownHandler(controller, guard_task))
    coordinator.register(TaskCancellationHandler([guard_task]))

    log.info("🏁 HueGuard running. Waiting for exit signal...")

    # Wait for shutdown signal (Ctrl+C, SIGTERM) or the guard loop ending
    await coordinator.wait_for_shutdown()

    await coordinator.shutdown_all()

    failed = not guard_task.cancelled() and guard_task.done() and guard_task.exception() is not None
    log.info("👋 HueGuard shut down.")
    return 1 if failed else 0


# ---------------------------------------------------------------------------
# ENTRY POINT
# ---------------------------------------------------------------------------

def run() -> None:
    exit_code = 1
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")
        exit_code = 0
    except HueGuardError as e:
        log.error(f"Fatal error: {e.message}", code=e.code, **e.details)
    except Exception as e:
        log.error(f"Fatal error: {e}", exc_info=True)
    sys.exit(exit_code)


if __name__ == "__main__":
    run()

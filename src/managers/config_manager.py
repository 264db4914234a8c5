"""
Config Manager

Main configuration manager with include system support.
Loads modular YAML files, validates them into AppConfig and persists the
bridge app key once registration succeeded.

File locations:
    config.yaml       $HUEGUARD_CONFIG, else ./config/config.yaml
    factory defaults  bundled next to this module
    credentials.yaml  $HUEGUARD_STATE_DIR, else $XDG_STATE_HOME/hueguard,
                      else ~/.local/state/hueguard
"""

import os
import yaml
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from models.config import AppConfig
from models.enums import LogLevel
from models.errors import ConfigError
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)

PathLike = Union[str, Path]

DEFAULT_CONFIG_PATH = Path("config") / "config.yaml"
FACTORY_DEFAULTS_PATH = Path(__file__).parent / "factory_defaults.yaml"
CREDENTIALS_FILENAME = "credentials.yaml"


def default_config_path() -> Path:
    return Path(os.getenv("HUEGUARD_CONFIG", str(DEFAULT_CONFIG_PATH))).expanduser()


def default_state_dir() -> Path:
    state_dir = os.getenv("HUEGUARD_STATE_DIR")
    if state_dir:
        return Path(state_dir).expanduser()
    xdg_state = os.getenv("XDG_STATE_HOME")
    base = Path(xdg_state).expanduser() if xdg_state else Path.home() / ".local" / "state"
    return base / "hueguard"


class ConfigManager:
    """
    Main configuration manager with include system support

    Loads config.yaml and processes include: directive to load modular YAML files.
    Falls back to the bundled factory_defaults.yaml when the main file cannot be read.
    A previously stored app key (credentials.yaml) overrides bridge.app_key.

    Example:
        config_manager = ConfigManager()
        config = config_manager.load()

        config.guard.poll_interval    # 1.0
        config.bridge.app_key         # None until registered

        config_manager.save_app_key("abc123")
    """

    def __init__(
        self,
        config_path: Optional[PathLike] = None,
        defaults_path: Optional[PathLike] = None,
        credentials_path: Optional[PathLike] = None
    ):
        """
        Initialize ConfigManager

        Args:
            config_path: Path to main config.yaml (relative paths are taken from the working directory)
            defaults_path: Path to factory defaults fallback
            credentials_path: Where the registered app key is persisted
        """
        self.config_path = Path(config_path) if config_path is not None else default_config_path()
        self.factory_defaults_path = Path(defaults_path) if defaults_path is not None else FACTORY_DEFAULTS_PATH
        self.credentials_path = (
            Path(credentials_path) if credentials_path is not None
            else default_state_dir() / CREDENTIALS_FILENAME
        )
        self.data: Dict = {}
        self.config: Optional[AppConfig] = None

    def load(self) -> AppConfig:
        """
        Load YAML configuration with include system support

        Process:
        1. Load main config.yaml
        2. If it has 'include:' list, load and merge those files
        3. Otherwise treat as monolithic config
        4. Fallback to factory defaults on failure
        5. Merge stored credentials and validate

        Raises:
            ConfigError: neither file could be loaded, or validation failed
        """
        try:
            main_config = self._read_yaml(self.config_path)

            if 'include' in main_config:
                log.info("Using include-based configuration")
                self.data = self._load_with_includes(main_config['include'], self.config_path.parent)
            else:
                log.info("Using monolithic configuration", path=str(self.config_path))
                self.data = main_config

        except Exception as ex:
            log.error("Failed to load config.yaml", error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")
            try:
                self.data = self._read_yaml(self.factory_defaults_path)
            except Exception as defaults_ex:
                raise ConfigError(
                    "No usable configuration",
                    details={"path": str(self.factory_defaults_path), "error": str(defaults_ex)}
                ) from defaults_ex

        self._merge_credentials()

        try:
            self.config = AppConfig.model_validate(self.data)
        except ValidationError as ex:
            raise ConfigError(
                "Invalid configuration",
                details={"errors": "; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in ex.errors()
                )}
            ) from ex

        log.info(
            "Configuration loaded",
            bridge=self.config.bridge.address or "auto-discover",
            registered=self.config.bridge.app_key is not None,
            mock=self.config.bridge.mock
        )
        return self.config

    @staticmethod
    def _read_yaml(path: Path) -> Dict:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"{path.name} must contain a mapping")
        return data

    def _load_with_includes(self, include_list: List[str], config_dir: Path) -> Dict:
        """
        Load and merge multiple YAML files from include list

        Args:
            include_list: List of filenames to load (e.g., ["bridge.yaml", "guard.yaml"])
            config_dir: Directory containing config files

        Returns:
            Merged config dict
        """
        merged = {}

        for filename in include_list:
            filepath = config_dir / filename
            try:
                file_data = self._read_yaml(filepath)
                if file_data:
                    merged.update(file_data)
                    log.info(f"Loaded {filename}", keys=str(list(file_data.keys())))
            except FileNotFoundError:
                log.error(f"File not found: {filename}")
                raise
            except Exception as ex:
                log.error(f"Error loading {filename}", error=str(ex))
                raise

        log.info("Config merge complete", total_keys=len(merged), keys=str(list(merged.keys())[:10]))
        return merged

    # ===== Credentials =====

    def _merge_credentials(self) -> None:
        if not self.credentials_path.exists():
            return
        try:
            credentials = self._read_yaml(self.credentials_path)
        except Exception as ex:
            log.warn("Ignoring unreadable credentials file", path=str(self.credentials_path), error=str(ex))
            return

        app_key = credentials.get("app_key")
        if app_key:
            bridge = dict(self.data.get("bridge") or {})
            bridge["app_key"] = app_key
            self.data["bridge"] = bridge
            log.debug("Using stored app key", path=str(self.credentials_path))

    def save_app_key(self, app_key: str) -> None:
        """Persist the registered app key so the next start skips registration."""
        self.credentials_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.credentials_path, "w", encoding="utf-8") as f:
            yaml.safe_dump({"app_key": app_key}, f)

        if self.config is not None:
            self.config.bridge.app_key = app_key
        log.info("App key stored", path=str(self.credentials_path))

    # ===== Convenience =====

    @property
    def log_level(self) -> LogLevel:
        if self.config is None:
            return LogLevel.INFO
        return LogLevel[self.config.logging.level]

from typing import Any, Literal, Optional
import json
import os
import threading
from pydantic import BaseModel, ConfigDict, Field
from loguru import logger

from reactivex.subject import Subject

from signaling.core.logging import setup_logging_from_config

CONFIG_ENV_VAR = "SIGNALING_CONFIG"


# --- Settings Models ---
class ContextSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    # Kind of primary execution context built when none was set explicitly
    primary: Literal["main_queue", "asyncio", "qt"] = "main_queue"
    # Post every delivery, even when already on the primary context
    always_async: bool = False


class LoggingSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    debug_mode: bool = False
    log_dir: Optional[str] = None


class SignalingConfig(BaseModel):
    context: ContextSettings = Field(default_factory=ContextSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# --- Manager ---
class ConfigManager:
    """
    Manages signaling configuration with optional persistence and reactivity.

    Changes made through `update()` are published on `on_changed` as
    `(section, key, value)` tuples.
    """
    def __init__(self, filepath: Optional[str] = None):
        self.filepath = filepath
        self._data = SignalingConfig()
        self.on_changed: Subject = Subject()
        self._load()

    @property
    def data(self) -> SignalingConfig:
        return self._data

    def update(self, section: str, key: str, value: Any):
        """Update a setting, validate via Pydantic, save, and emit change event."""
        if section not in SignalingConfig.model_fields:
            raise ValueError(f"Invalid section: {section}")

        section_obj = getattr(self._data, section)
        if key not in type(section_obj).model_fields:
            raise ValueError(f"Invalid key: {key} in section {section}")

        setattr(section_obj, key, value)
        self._save()
        self.on_changed.on_next((section, key, getattr(section_obj, key)))

    def get(self, section: str, key: str) -> Any:
        section_obj = getattr(self._data, section)
        return getattr(section_obj, key)

    def _load(self):
        """Load settings from JSON or TOML file if present; otherwise keep defaults."""
        if not self.filepath or not os.path.isfile(self.filepath):
            return
        try:
            if self.filepath.endswith('.toml'):
                import tomllib
                with open(self.filepath, "rb") as f:
                    raw = tomllib.load(f)
            else:
                with open(self.filepath, "r", encoding="utf-8") as f:
                    raw = json.load(f)
            self._data = SignalingConfig.model_validate(raw)
            logger.debug(f"Loaded signaling config from {self.filepath}")
        except Exception as e:
            logger.error(f"Failed to load config from {self.filepath}: {e}")

    def _save(self):
        """Persist current config to JSON file."""
        if not self.filepath or self.filepath.endswith('.toml'):
            return
        try:
            dirname = os.path.dirname(self.filepath)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._data.model_dump(), f, indent=4)
        except Exception as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")


_manager: Optional[ConfigManager] = None
_manager_lock = threading.Lock()


def _create_manager(filepath: Optional[str]) -> ConfigManager:
    """Build the process-wide manager and let it drive the logging setup."""
    manager = ConfigManager(filepath)
    if filepath:
        setup_logging_from_config(manager.data)

    def on_changed(change):
        section, _, _ = change
        if section == "logging":
            setup_logging_from_config(manager.data)

    manager.on_changed.subscribe(on_changed)
    return manager


def get_config_manager() -> ConfigManager:
    """Return the process-wide ConfigManager, reading SIGNALING_CONFIG on first use."""
    global _manager
    with _manager_lock:
        if _manager is None:
            _manager = _create_manager(os.environ.get(CONFIG_ENV_VAR))
        return _manager


def configure(filepath: Optional[str] = None) -> ConfigManager:
    """
    Replace the process-wide ConfigManager with one loaded from `filepath`.

    A config file also applies its `logging` section; later updates to that
    section through the manager are applied as they happen.
    """
    global _manager
    with _manager_lock:
        _manager = _create_manager(filepath)
        return _manager

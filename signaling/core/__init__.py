"""
Core - configuration, logging and error types shared by every layer.
"""
from .errors import SignalingError, ContextError
from .config import ConfigManager, SignalingConfig, get_config_manager, configure
from .logging import setup_logging

__all__ = [
    "SignalingError",
    "ContextError",
    "ConfigManager",
    "SignalingConfig",
    "get_config_manager",
    "configure",
    "setup_logging",
]

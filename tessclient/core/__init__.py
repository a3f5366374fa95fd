"""
Core client components.

This module contains the client state machine, its image slot, configuration
management and the error taxonomy.
"""

from .errors import (
    TessClientError,
    ConfigPathError,
    EngineInitError,
    MissingImagePathError,
    EmptyImageDataError,
    ImageNotFoundError,
    VariableBindError,
    RecognitionError,
    ClientClosedError,
)
from .config import ClientConfig, ConfigManager, get_config, update_config
from .client import Client, engine_version, clear_persistent_cache

__all__ = [
    "Client", "engine_version", "clear_persistent_cache",
    "ClientConfig", "ConfigManager", "get_config", "update_config",
    "TessClientError", "ConfigPathError", "EngineInitError",
    "MissingImagePathError", "EmptyImageDataError", "ImageNotFoundError",
    "VariableBindError", "RecognitionError", "ClientClosedError",
]

"""
Configuration management for tess-client.

This module handles loading and managing client defaults from a JSON config
file and environment variables.
"""

import os
from pathlib import Path
from typing import Dict, Any, List, Optional
import json
from dataclasses import dataclass, asdict, field

from ..ocr.base import PageSegMode
from ..utils.logger import get_core_logger


logger = get_core_logger()


def split_languages(value: str) -> List[str]:
    """Split a language string such as "eng+deu" or "eng,deu"."""
    return [lang.strip() for lang in value.replace(',', '+').split('+') if lang.strip()]


def _valid_page_seg_mode(value: Any) -> Optional[int]:
    try:
        return int(PageSegMode(int(value)))
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid page segmentation mode: {value!r}")
        return None


@dataclass
class ClientConfig:
    """Default settings applied to new clients."""

    # Engine settings
    languages: List[str] = field(default_factory=list)
    tessdata_prefix: Optional[str] = None
    tesseract_cmd: Optional[str] = None
    config_file: Optional[str] = None

    # Recognition settings
    page_seg_mode: Optional[int] = None
    variables: Dict[str, str] = field(default_factory=dict)
    trim: bool = True

    # Logging settings
    log_level: str = "INFO"
    log_to_file: bool = False

    def __post_init__(self):
        """Normalize values read from file or environment and expand user paths."""
        if isinstance(self.languages, str):
            self.languages = split_languages(self.languages)
        if self.page_seg_mode is not None:
            self.page_seg_mode = _valid_page_seg_mode(self.page_seg_mode)
        if self.tessdata_prefix:
            self.tessdata_prefix = os.path.expanduser(self.tessdata_prefix)
        if self.config_file:
            self.config_file = os.path.expanduser(self.config_file)


class ConfigManager:
    """Manages configuration loading and saving."""

    CONFIG_FILE = "~/.tess-client.json"

    @classmethod
    def load_config(cls) -> ClientConfig:
        """Load configuration from file and environment variables."""
        config = ClientConfig()

        config_path = Path(cls.CONFIG_FILE).expanduser()
        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    cls._update_config_from_dict(config, file_config)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Could not load config file {config_path}: {e}")

        cls._load_from_env(config)

        # Re-run path expansion for values coming from file or environment
        config.__post_init__()
        return config

    @classmethod
    def save_config(cls, config: ClientConfig) -> bool:
        """Save configuration to file."""
        try:
            config_path = Path(cls.CONFIG_FILE).expanduser()
            config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(asdict(config), f, indent=2, ensure_ascii=False)
            return True
        except IOError as e:
            logger.error(f"Error saving config: {e}")
            return False

    @staticmethod
    def _update_config_from_dict(config: ClientConfig, data: Dict[str, Any]):
        """Update config object from dictionary."""
        for key, value in data.items():
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                logger.debug(f"Ignoring unknown config key: {key}")

    @staticmethod
    def _load_from_env(config: ClientConfig):
        """Load configuration from environment variables."""
        env_mappings = {
            'TESSDATA_PREFIX': 'tessdata_prefix',
            'TESSERACT_CMD': 'tesseract_cmd',
            'TESS_CLIENT_CONFIG_FILE': 'config_file',
            'TESS_CLIENT_LOG_LEVEL': 'log_level',
        }

        for env_var, config_attr in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setattr(config, config_attr, value)

        # Accept both "eng+deu" and "eng,deu"
        languages = os.getenv('TESS_CLIENT_LANGUAGES')
        if languages:
            config.languages = split_languages(languages)

        psm = os.getenv('TESS_CLIENT_PSM')
        if psm and psm.isdigit():
            config.page_seg_mode = int(psm)

        # Handle boolean environment variables
        trim = os.getenv('TESS_CLIENT_TRIM')
        if trim:
            config.trim = trim.lower() in ('true', '1', 'yes', 'on')

        log_to_file = os.getenv('TESS_CLIENT_LOG_TO_FILE')
        if log_to_file:
            config.log_to_file = log_to_file.lower() in ('true', '1', 'yes', 'on')


# Global configuration instance
_config: Optional[ClientConfig] = None


def get_config() -> ClientConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ConfigManager.load_config()
    return _config


def update_config(new_config: ClientConfig) -> bool:
    """Update the global configuration and save to file."""
    global _config
    _config = new_config
    return ConfigManager.save_config(new_config)

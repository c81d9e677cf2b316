"""Simple YAML configuration loader for LiveScribe."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List
import logging

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "recognition": {
        "language": "en-US",
        "max_alternatives": 3,
        "interim_results": True,
    },
    "restart": {
        "default_delay_seconds": 0.5,
        "no_speech_delay_seconds": 1.0,
        "network_delay_seconds": 2.0,
        "other_delay_seconds": 1.0,
    },
    "google_cloud": {
        "model": "latest_long",
        "enable_automatic_punctuation": True,
    },
    "audio": {
        "sample_rate": 16000,
        "chunk_size": 1600,
        "channels": 1,
    },
    "logging": {
        "level": "INFO",
        "file_path": "data/logs/livescribe.log",
        "console_output": True,
    },
}

SUPPORTED_LANGUAGES: List[Dict[str, str]] = [
    {"code": "en-US", "name": "English (US)"},
    {"code": "en-GB", "name": "English (UK)"},
    {"code": "en-IN", "name": "English (India)"},
    {"code": "ur-PK", "name": "Urdu (Pakistan)"},
    {"code": "ur-IN", "name": "Urdu (India)"},
]


def get_supported_languages() -> List[Dict[str, str]]:
    """Get the commonly used recognition languages."""
    return [dict(language) for language in SUPPORTED_LANGUAGES]


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class LiveScribeConfig:
    """LiveScribe configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, the built-in
                        defaults are used.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping")

        config = _merge(DEFAULT_CONFIG, config)
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        # Resolve Google credentials path
        if 'google_cloud' in config and 'credentials_path' in config['google_cloud']:
            creds_path = config['google_cloud']['credentials_path']
            if creds_path and not os.path.isabs(creds_path):
                config['google_cloud']['credentials_path'] = str(config_dir / creds_path)

        # Resolve log file path
        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'recognition.language').

        Args:
            key_path: Dot-separated key path (e.g., 'restart.network_delay_seconds')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'recognition.language')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_google_credentials_path(self) -> Optional[str]:
        """Get Google credentials path, or None if not configured or missing."""
        creds_path = self.get('google_cloud.credentials_path')
        if not creds_path:
            return None

        creds_file = Path(creds_path)
        if not creds_file.exists():
            logger.warning(f"Google credentials file not found: {creds_path}")
            return None

        return str(creds_file.absolute())

"""
Configuration loader for Atlas Admin.
Uses YAML format for cleaner, more readable configuration.
"""

import yaml
import os
from pathlib import Path
from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)

API_URL_ENV = "ATLAS_API_URL"
DEFAULT_API_URL = "http://localhost:3333"


class Config:
    """Singleton configuration manager."""

    _instance: Optional['Config'] = None
    _data: dict = {}
    _project_root: Path = None

    def __new__(cls, config_path: Optional[str] = None) -> 'Config':
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._project_root = Path(__file__).resolve().parent.parent.parent
            instance._load(config_path)
            cls._instance = instance
        return cls._instance

    def _load(self, config_path: Optional[str] = None) -> None:
        """Load configuration from YAML file."""
        if config_path:
            path = Path(config_path)
        else:
            path = self._project_root / "config.yaml"

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            self._data = yaml.safe_load(f) or {}

        # Validate required sections
        required = ['general', 'api']
        missing = [s for s in required if s not in self._data]
        if missing:
            raise ValueError(f"Missing required config sections: {missing}")

        logger.info(f"Configuration loaded from {path}")

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Get a nested config value using dot notation.
        Example: config.get('api', 'timeout') -> config['api']['timeout']
        """
        value = self._data
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_int(self, *keys: str, default: int = 0) -> int:
        """Get integer value."""
        value = self.get(*keys, default=default)
        return int(value) if value is not None else default

    def get_float(self, *keys: str, default: float = 0.0) -> float:
        """Get float value."""
        value = self.get(*keys, default=default)
        return float(value) if value is not None else default

    def get_bool(self, *keys: str, default: bool = False) -> bool:
        """Get boolean value."""
        value = self.get(*keys, default=default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ('true', 'yes', '1', 'on')
        return bool(value)

    @property
    def data_dir(self) -> Path:
        """Get data directory path, creating if needed."""
        dir_name = self.get('general', 'data_dir', default='data')
        path = self._project_root / dir_name
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def log_path(self) -> Path:
        """Get log file path."""
        log_name = self.get('general', 'log_file', default='atlas_admin.log')
        return self._project_root / log_name

    @property
    def session_path(self) -> Path:
        """Get persisted session file path."""
        file_name = self.get('session', 'file', default='session.yaml')
        return self.data_dir / file_name

    @property
    def api_base_url(self) -> str:
        """API base URL. The environment variable wins over the file."""
        return os.environ.get(API_URL_ENV) or self.get('api', 'base_url', default=DEFAULT_API_URL)

    @property
    def api_timeout(self) -> float:
        """Request timeout in seconds."""
        return self.get_float('api', 'timeout', default=15.0)


# Global config instance (initialized on first import)
def get_config() -> Config:
    """Get the global config instance."""
    return Config()

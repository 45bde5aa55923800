"""
Configuration Loader - Manages YAML configuration and environment variables
"""
import yaml
import os
from typing import Any, Dict, Optional


def random_seed_from_env() -> Optional[int]:
    """Seed from DGS_RANDOM_SEED, or None when unset"""
    env_seed = os.getenv('DGS_RANDOM_SEED')
    if not env_seed:
        return None
    try:
        return int(env_seed)
    except ValueError:
        raise ValueError(f"DGS_RANDOM_SEED must be an integer, got {env_seed!r}")


class Config:
    """Configuration manager for the selection engine"""

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = config_path
        self.config = self._load_config()
        self._validate_config()

    def _load_config(self) -> dict:
        """Load configuration from YAML file"""
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            return yaml.safe_load(f) or {}

    def _validate_config(self):
        """Validate section types (every section is optional)"""
        if not isinstance(self.config, dict):
            raise ValueError(f"Configuration root must be a mapping in {self.config_path}")

        for section in ('dgs', 'logging', 'genre'):
            value = self.config.get(section)
            if value is not None and not isinstance(value, dict):
                raise ValueError(f"Configuration section '{section}' must be a mapping")

        dgs = self.config.get('dgs') or {}
        for section in ('selection', 'categorization', 'target_filter', 'quality'):
            value = dgs.get(section)
            if value is not None and not isinstance(value, dict):
                raise ValueError(f"Configuration section 'dgs.{section}' must be a mapping")

        seed = dgs.get('random_seed')
        if seed is not None and not isinstance(seed, int):
            raise ValueError(f"dgs.random_seed must be an integer, got {seed!r}")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get configuration value

        Args:
            section: Configuration section
            key: Configuration key
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        if section not in self.config or not self.config[section]:
            return default
        return self.config[section].get(key, default)

    @property
    def dgs_overrides(self) -> Dict[str, Any]:
        """Selection overrides for default_dgs_config()"""
        dgs = self.config.get('dgs') or {}
        return {
            key: dict(dgs[key])
            for key in ('selection', 'categorization', 'target_filter', 'quality')
            if dgs.get(key)
        }

    @property
    def random_seed(self) -> Optional[int]:
        """Get the selection random seed (with environment variable override)"""
        env_seed = random_seed_from_env()
        if env_seed is not None:
            return env_seed
        return self.get('dgs', 'random_seed')

    @property
    def genre_edges_path(self) -> Optional[str]:
        """Get optional YAML file of extra genre cluster edges"""
        return self.get('genre', 'edges_path')

    @property
    def log_level(self) -> str:
        """Get logging level (with environment variable override)"""
        return (os.getenv('LOG_LEVEL') or self.get('logging', 'level', 'INFO')).upper()

    @property
    def log_file(self) -> Optional[str]:
        """Get log file path (with environment variable override)"""
        return os.getenv('LOG_FILE') or self.get('logging', 'file')

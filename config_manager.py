# config_manager.py - Configuration Management System

import json
import os
import logging
from typing import Dict, Any, List

logger = logging.getLogger(__name__)

class ConfigManager:
    """Centralized configuration management for the API service"""

    def __init__(self, config_file: str = None):
        # Auto-detect environment and config file
        self.environment = os.getenv('ENVIRONMENT', 'development')

        if config_file is None:
            if self.environment == 'production':
                config_file = "config_production.json"
            elif self.environment == 'staging':
                config_file = "config_staging.json"
            else:
                config_file = "config.json"

        self.config_file = config_file
        self._config: Dict[str, Any] = {}
        self._load_config()
        self._apply_environment_overrides()
        self._validate_config()

    def _load_config(self):
        """Load configuration from JSON file, layered over the defaults"""
        self._config = self._get_default_config()
        if not os.path.exists(self.config_file):
            logger.info(f"Config file {self.config_file} not found, using defaults")
            return

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading config: {e}")
            raise ValueError(f"Unreadable configuration file {self.config_file}") from e

        self._merge(self._config, loaded)
        logger.info(f"Configuration loaded from {self.config_file}")

    @staticmethod
    def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                ConfigManager._merge(base[key], value)
            else:
                base[key] = value

    def _apply_environment_overrides(self):
        """Apply environment variable overrides"""
        # Override allowed origins if ALLOWED_ORIGINS is set
        allowed_origins = os.getenv('ALLOWED_ORIGINS')
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(',') if origin.strip()]
            self.set('security.allowed_origins', origins)
            logger.info(f"CORS origins overridden from environment: {origins}")

        database_path = os.getenv('DATABASE_PATH')
        if database_path:
            self.set('database.path', database_path)

        host = os.getenv('HOST')
        if host:
            self.set('server.host', host)

        port = os.getenv('PORT')
        if port:
            try:
                self.set('server.port', int(port))
            except ValueError:
                raise ValueError(f"PORT must be an integer, got {port!r}")

        log_level = os.getenv('LOG_LEVEL')
        if log_level:
            self.set('logging.level', log_level)

        # Override database path for production
        if self.environment == 'production' and not database_path:
            self.set('database.path', '/app/data/meetings.db')

    def _validate_config(self):
        """Validate configuration values"""
        errors = []

        # Validate required sections
        required_sections = ['server', 'security', 'database', 'meetings']
        for section in required_sections:
            if section not in self._config:
                errors.append(f"Missing required section: {section}")

        port = self.get('server.port', 5000)
        if not isinstance(port, int) or not 0 < port < 65536:
            errors.append("server.port must be between 1 and 65535")

        upcoming_limit = self.get('meetings.upcoming_limit', 10)
        if not isinstance(upcoming_limit, int) or upcoming_limit < 1:
            errors.append("meetings.upcoming_limit must be at least 1")

        if not isinstance(self.get('security.allowed_origins', []), list):
            errors.append("security.allowed_origins must be a list")

        if errors:
            logger.error("Configuration validation errors:")
            for error in errors:
                logger.error(f"  - {error}")
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        logger.debug("Configuration validation passed")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'meetings.upcoming_limit')"""
        keys = key.split('.')
        value = self._config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot notation"""
        keys = key.split('.')
        config = self._config

        # Navigate to the parent of the target key
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        # Set the value
        config[keys[-1]] = value

    def get_allowed_origins(self) -> List[str]:
        """Get allowed origins for CORS"""
        return list(self.get('security.allowed_origins', []))

    def get_database_path(self) -> str:
        """Get database path"""
        return self.get('database.path', 'meetings.db')

    def get_upcoming_limit(self) -> int:
        return self.get('meetings.upcoming_limit', 10)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            "server": {
                "host": "0.0.0.0",
                "port": 5000,
                "debug": False,
                "reload": False
            },
            "security": {
                "allowed_origins": ["*"]
            },
            "database": {
                "path": "meetings.db"
            },
            "meetings": {
                "upcoming_limit": 10
            },
            "logging": {
                "level": "INFO"
            }
        }

# Global configuration instance
config = ConfigManager()

def get_config() -> ConfigManager:
    """Get the global configuration instance"""
    return config

"""
Configuration management for md-zapper.

Handles loading and saving configuration from the YAML config file and
environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

_TRUTHY = ('true', '1', 'yes', 'on')


@dataclass
class ZapperConfig:
    """Main configuration for md-zapper."""

    # Apply the cleanup pipeline to converted markdown
    cleanup_markdown: bool = True

    # Location used to resolve relative links and images when a document has none
    base_url: Optional[str] = None

    # Show the shortcut overlay when picking is enabled
    show_hints: bool = True

    log_level: str = "WARNING"


class ConfigManager:
    """Manages md-zapper configuration from multiple sources."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path.home() / '.md-zapper'
        self.config_file = self.config_dir / 'config.yaml'
        self._config: Optional[ZapperConfig] = None

    def load_config(self, refresh: bool = False) -> ZapperConfig:
        """Load configuration from all sources."""
        if self._config and not refresh:
            return self._config

        # Start with defaults
        config = ZapperConfig()

        # Load from file if it exists
        if self.config_file.exists():
            file_config = self._load_from_file()
            config = self._merge_configs(config, file_config)

        # Override with environment variables
        env_config = self._load_from_env()
        config = self._merge_configs(config, env_config)

        self._config = config
        return config

    def _load_from_file(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(self.config_file, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load config file {self.config_file}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {self.config_file}: expected a mapping")
            return {}
        return data

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        cleanup = os.getenv('MD_ZAPPER_CLEANUP')
        if cleanup:
            env_config['cleanup_markdown'] = cleanup.lower() in _TRUTHY

        base_url = os.getenv('MD_ZAPPER_BASE_URL')
        if base_url:
            env_config['base_url'] = base_url

        show_hints = os.getenv('MD_ZAPPER_SHOW_HINTS')
        if show_hints:
            env_config['show_hints'] = show_hints.lower() in _TRUTHY

        log_level = os.getenv('MD_ZAPPER_LOG_LEVEL')
        if log_level:
            env_config['log_level'] = log_level.upper()

        return env_config

    def _merge_configs(self, base: ZapperConfig, override: Dict[str, Any]) -> ZapperConfig:
        """Merge an override mapping into the config."""
        if 'cleanup_markdown' in override:
            base.cleanup_markdown = bool(override['cleanup_markdown'])
        if 'base_url' in override:
            base.base_url = override['base_url'] or None
        if 'show_hints' in override:
            base.show_hints = bool(override['show_hints'])
        if 'log_level' in override:
            base.log_level = str(override['log_level']).upper()
        return base

    def save_config(self, config: ZapperConfig) -> None:
        """Save configuration to file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        config_dict = {
            'cleanup_markdown': config.cleanup_markdown,
            'show_hints': config.show_hints,
            'log_level': config.log_level,
        }
        if config.base_url:
            config_dict['base_url'] = config.base_url

        try:
            with open(self.config_file, 'w') as f:
                yaml.dump(config_dict, f, default_flow_style=False, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config file {self.config_file}: {e}")
            raise

        self._config = config

    def create_default_config(self) -> None:
        """Create a default configuration file."""
        self.save_config(ZapperConfig())
        logger.info(f"Created default configuration at {self.config_file}")

    def get_config_info(self) -> Dict[str, Any]:
        """Get information about current configuration."""
        config = self.load_config()

        return {
            'config_file': str(self.config_file),
            'config_exists': self.config_file.exists(),
            'cleanup_markdown': config.cleanup_markdown,
            'base_url': config.base_url,
            'show_hints': config.show_hints,
            'log_level': config.log_level,
        }


# Global config manager instance
_config_manager: Optional[ConfigManager] = None

def get_config_manager() -> ConfigManager:
    """Get the global config manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager

def load_config() -> ZapperConfig:
    """Load the current configuration."""
    return get_config_manager().load_config()

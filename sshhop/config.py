"""
Configuration Manager for sshhop
Handles application settings stored as JSON
"""

import copy
import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

from .platform_utils import get_config_dir, get_ssh_config_path

logger = logging.getLogger(__name__)

# Increment this whenever the configuration format changes
CONFIG_VERSION = 1


class Config:
    """Configuration manager for sshhop"""

    def __init__(self, config_dir: Optional[str] = None):
        self.config_file = os.path.join(config_dir or get_config_dir(), 'config.json')
        self.config_data = self.load_json_config()

    def get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values"""
        return {
            'config_version': CONFIG_VERSION,
            'ssh': {
                'config_path': None,  # None means ~/.ssh/config
                'term': 'xterm-256color',
                'login_shell': 'bash --login',
            },
            'logging': {
                'debug_enabled': False,
            },
        }

    def load_json_config(self) -> Dict[str, Any]:
        """Load configuration from JSON file"""
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    config = json.load(f)

                # Purge outdated configurations
                stored_version = config.get('config_version', 1)
                if not isinstance(stored_version, int) or stored_version < CONFIG_VERSION:
                    backup_file = f"{self.config_file}.bak"
                    try:
                        os.replace(self.config_file, backup_file)
                        logger.warning(
                            "Outdated config version %s detected; backing up to %s and regenerating defaults",
                            stored_version,
                            backup_file,
                        )
                    except OSError:
                        os.remove(self.config_file)
                        logger.warning(
                            "Outdated config version %s detected; old config removed and new defaults generated",
                            stored_version,
                        )
                    config = self.get_default_config()
                    self.save_json_config(config)
                else:
                    config, updated = self._ensure_config_defaults(config)
                    if updated:
                        self.save_json_config(config)

                return config
            else:
                # Create default config
                default_config = self.get_default_config()
                self.save_json_config(default_config)
                return default_config
        except (OSError, ValueError, AttributeError, TypeError) as e:
            logger.error(f"Failed to load JSON config: {e}")
            return self.get_default_config()

    def _ensure_config_defaults(self, config: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
        """Fill in keys that are missing from an older or hand-edited file."""
        merged = copy.deepcopy(config)
        updated = False

        def _merge(target: Dict[str, Any], defaults: Dict[str, Any]):
            nonlocal updated
            for key, value in defaults.items():
                if key not in target:
                    target[key] = copy.deepcopy(value)
                    updated = True
                elif isinstance(value, dict) and isinstance(target[key], dict):
                    _merge(target[key], value)

        _merge(merged, self.get_default_config())
        return merged, updated

    def save_json_config(self, config_data: Dict[str, Any] = None):
        """Save configuration to JSON file"""
        try:
            if config_data is None:
                config_data = self.config_data

            os.makedirs(os.path.dirname(self.config_file), exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(config_data, f, indent=2)

            logger.debug("Configuration saved to JSON file")
        except OSError as e:
            logger.error(f"Failed to save JSON config: {e}")

    def get_setting(self, key: str, default=None):
        """Get a setting value using a dotted key such as ``ssh.term``"""
        value = self.config_data
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def get_ssh_config_path(self) -> str:
        """Return the SSH client config to browse.

        The ``ssh.config_path`` setting wins over the default location.
        """
        configured = self.get_setting('ssh.config_path')
        if isinstance(configured, str) and configured.strip():
            return os.path.abspath(os.path.expanduser(os.path.expandvars(configured)))
        return get_ssh_config_path()

    def is_debug_enabled(self) -> bool:
        if os.environ.get('SSHHOP_DEBUG'):
            return True
        return bool(self.get_setting('logging.debug_enabled', False))


__all__ = ["CONFIG_VERSION", "Config"]

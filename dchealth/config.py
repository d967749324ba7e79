#!/usr/bin/env python3
"""
DC Health Report - Configuration Manager
Loads the YAML configuration and merges it over the built-in defaults.
"""

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .logger import get_logger
from .paths import paths

logger = get_logger('Config')


class Config:
    """Configuration manager backed by a YAML file."""

    DEFAULTS = {
        'version': '1.0.0',
        'report': {
            'title': 'Active Directory Health Check',
        },
        'checks': {
            'timeout_seconds': 60,
            # Service checks come first in the summary table
            'services': ['DNS', 'NTDS', 'Netlogon'],
            'diagnostics': [
                'Netlogons',
                'Replications',
                'Services',
                'Advertising',
                'FSMOCheck',
                'SysVolCheck',
                'KnowsOfRoleHolders',
            ],
        },
        'event_log': {
            'log_name': 'Directory Service',
            'level': 2,  # 2 = Error
            'days': 1,
        },
        'mail': {
            'enabled': True,
            'to': 'ad-admins@example.com',
            'from': 'dc-health@example.com',
            'subject': 'Active Directory Health Report',
            'smtp_server': 'localhost',
            'port': 25,
            'use_tls': False,
            'authenticate': False,
            'username': '',
        },
    }

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else paths.config_file
        self._config: Dict[str, Any] = {}
        self._load()

    def _load(self):
        """Load configuration from file or create defaults."""
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    loaded = yaml.safe_load(f) or {}
                if not isinstance(loaded, dict):
                    raise ValueError("top level must be a mapping")
                # Merge with defaults for any missing keys
                self._config = self._deep_merge(copy.deepcopy(self.DEFAULTS), loaded)
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load {self.config_file}, using defaults: {e}")
                self._config = copy.deepcopy(self.DEFAULTS)
        else:
            self._config = copy.deepcopy(self.DEFAULTS)
            self.save()  # Create default config file

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge override into base."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def save(self):
        """Save configuration to file."""
        self.config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, 'w') as f:
            yaml.dump(self._config, f, default_flow_style=False, sort_keys=False)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value using dot notation (e.g., 'checks.timeout_seconds')."""
        keys = key.split('.')
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any):
        """Set a config value using dot notation."""
        keys = key.split('.')
        config = self._config
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def get_timeout(self) -> float:
        """Per-check timeout in seconds."""
        return float(self.get('checks.timeout_seconds', 60))

    def get_service_checks(self) -> List[str]:
        return list(self.get('checks.services', []))

    def get_diagnostic_checks(self) -> List[str]:
        return list(self.get('checks.diagnostics', []))

    def get_event_log_days(self) -> int:
        """Trailing window for the error-log query, in days."""
        return int(self.get('event_log.days', 1))

    def get_mail_section(self) -> Dict[str, Any]:
        return dict(self.get('mail', {}))

    def is_mail_enabled(self) -> bool:
        return bool(self.get('mail.enabled', False))

    def to_dict(self) -> Dict[str, Any]:
        """Return full config as dictionary."""
        return copy.deepcopy(self._config)

    def reload(self):
        """Reload configuration from file."""
        self._load()


_config: Optional[Config] = None


def get_config() -> Config:
    """Get the shared config instance for the default config file."""
    global _config
    if _config is None:
        _config = Config()
    return _config

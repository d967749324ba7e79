#!/usr/bin/env python3
"""
DC Health Report - Path Resolver
Resolves the per-user state directory (configuration, sealed credential,
encryption key) and the default report/log locations.
State lives under DC_HEALTH_HOME (env var) or ~/.dc-health.
"""

import os
import shutil
import sys
from pathlib import Path
from typing import Optional

# Default outputs are relative to the working directory of the run
DEFAULT_REPORT_PATH = Path('ADHealthReport.htm')
DEFAULT_LOG_PATH = Path('ADHealthReport.log')


class HealthPaths:
    """Path resolver for the health report state directory."""

    _instance: Optional['HealthPaths'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        self._resolve_home()

    def _resolve_home(self):
        """Resolve DC_HEALTH_HOME from environment or fall back to ~/.dc-health."""
        if 'DC_HEALTH_HOME' in os.environ:
            self.home = Path(os.environ['DC_HEALTH_HOME']).expanduser().resolve()
        else:
            self.home = Path.home() / '.dc-health'

    @property
    def config_file(self) -> Path:
        """Active YAML configuration file."""
        return self.home / 'config.yaml'

    @property
    def credential_file(self) -> Path:
        """Sealed mail credential written by --create-password-file."""
        return self.home / 'mail.cred'

    @property
    def key_file(self) -> Path:
        """Fernet key used to seal the mail credential."""
        return self.home / '.cred_key'

    @property
    def report_file(self) -> Path:
        """Default HTML report location."""
        return DEFAULT_REPORT_PATH

    @property
    def log_file(self) -> Path:
        """Default run log location."""
        return DEFAULT_LOG_PATH

    def find_tool(self, tool_name: str) -> Optional[Path]:
        """
        Find an external tool (powershell, dcdiag, ping).
        Checks: 1) System32 on Windows, 2) system PATH
        """
        if sys.platform == 'win32':
            system_root = Path(os.environ.get('SystemRoot', r'C:\Windows'))
            candidates = [
                system_root / 'System32' / f'{tool_name}.exe',
                system_root / 'System32' / 'WindowsPowerShell' / 'v1.0' / f'{tool_name}.exe',
            ]
            for candidate in candidates:
                if candidate.exists():
                    return candidate

        system_path = shutil.which(tool_name)
        if system_path:
            return Path(system_path)

        return None

    def __str__(self) -> str:
        return f"HealthPaths(home={self.home})"

    def __repr__(self) -> str:
        return self.__str__()


# Singleton instance for easy import
paths = HealthPaths()


def get_paths() -> HealthPaths:
    """Get the singleton paths instance."""
    return paths

"""
DC Health Report - Active Directory domain controller health report
"""

__version__ = '1.0.0'

from .paths import paths, get_paths
from .config import Config, get_config

__all__ = [
    'paths', 'get_paths',
    'Config', 'get_config',
]

"""
DC Health Report - Scanner Modules
"""

from .base import BaseScanner, PowerShellRunner
from .dc_scanner import DomainControllerScanner

__all__ = ['BaseScanner', 'PowerShellRunner', 'DomainControllerScanner']

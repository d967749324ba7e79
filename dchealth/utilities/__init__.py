"""
DC Health Report - Utility Modules
"""

from .reporter import HealthReportBuilder

__all__ = ['HealthReportBuilder']

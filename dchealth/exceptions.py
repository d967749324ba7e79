#!/usr/bin/env python3
"""
DC Health Report - Exceptions
"""


class DCHealthError(Exception):
    """Base class for health report errors."""


class RemoteCommandError(DCHealthError):
    """A PowerShell script or external tool failed against a remote host."""

    def __init__(self, reason: str, command: str = ''):
        super().__init__(reason)
        self.reason = reason
        self.command = command


class DiscoveryError(DCHealthError):
    """Forest, domain or domain controller metadata could not be enumerated."""


class CredentialError(DCHealthError):
    """The mail credential could not be sealed or unsealed."""


class NotificationError(DCHealthError):
    """The report could not be dispatched by mail."""

#!/usr/bin/env python3
"""
DC Health Report - Base Scanner Class
Provides PowerShell and external-tool execution shared by the inventory
and the domain controller scanner.
"""

import json
import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ..exceptions import RemoteCommandError
from ..logger import get_logger
from ..paths import get_paths


def ps_quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + str(value).replace("'", "''") + "'"


class PowerShellRunner:
    """Runs Windows PowerShell scripts and command-line tools."""

    LOG_CATEGORY = 'Main'

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.paths = get_paths()
        self.logger = logger or get_logger(self.LOG_CATEGORY)

    def _resolve_tool(self, tool_name: str) -> str:
        tool_path = self.paths.find_tool(tool_name)
        if tool_path:
            return str(tool_path)
        # Let subprocess report the missing executable
        return tool_name

    def run_tool(self, command: List[str], timeout: Optional[float] = None,
                 description: str = "") -> subprocess.CompletedProcess:
        """Run an external tool with logging."""
        self.logger.debug(f"Running: {' '.join(command[:3])}...")

        try:
            return subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except subprocess.TimeoutExpired:
            raise RemoteCommandError(
                f"{description or command[0]} timed out after {timeout}s",
                ' '.join(command))
        except OSError as e:
            raise RemoteCommandError(
                f"{description or command[0]} could not be started: {e}",
                ' '.join(command))

    def _run_ps(self, script: str, timeout: Optional[float] = 120) -> str:
        """Execute a PowerShell command and return stdout.

        Raises RemoteCommandError with the stderr text on a non-zero exit.
        """
        cmd = [
            self._resolve_tool('powershell'),
            '-NoProfile',
            '-NonInteractive',
            '-ExecutionPolicy', 'Bypass',
            '-Command', script,
        ]
        self.logger.debug(
            f"PS> {script[:120]}{'...' if len(script) > 120 else ''}"
        )
        proc = self.run_tool(cmd, timeout=timeout, description='PowerShell')
        if proc.returncode != 0:
            stderr = (proc.stderr or '').strip()
            raise RemoteCommandError(
                stderr.splitlines()[0] if stderr else f"exit code {proc.returncode}",
                script)
        return (proc.stdout or '').strip()

    def _run_ps_json(self, script: str, timeout: Optional[float] = 120) -> Any:
        """Run a PowerShell command and parse the JSON output."""
        raw = self._run_ps(
            f"{script} | ConvertTo-Json -Depth 4 -Compress", timeout=timeout)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise RemoteCommandError(f"Unparseable PowerShell output: {e}", script)


class BaseScanner(PowerShellRunner, ABC):
    """Base class for scanners."""

    SCANNER_NAME = "base"
    SCANNER_DESCRIPTION = "Base scanner class"

    @abstractmethod
    def scan(self, targets: List[Any], **kwargs) -> Any:
        """Execute the scan. Must be implemented by subclasses."""
        pass

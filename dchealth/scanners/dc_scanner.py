#!/usr/bin/env python3
"""
DC Health Report - Domain Controller Scanner

For each domain controller, in order:
  1. Ping once. Unreachable DCs get a failure placeholder for every
     check and nothing else is run against them.
  2. Service checks (Get-Service) and dcdiag tests, one at a time,
     each bounded by the check timeout.
  3. Static attributes from the directory inventory.
  4. Error count from the remote event log for the trailing window.
"""

import logging
from typing import Callable, List, Optional, Tuple

from ..checks import (DEFAULT_TIMEOUT, SERVICE, Check, diagnostic_passed,
                      run_with_timeout, service_running)
from ..exceptions import DCHealthError, RemoteCommandError
from ..models import CheckOutcome, DCResult, DomainController
from ..network import is_reachable
from .base import BaseScanner, ps_quote


class DomainControllerScanner(BaseScanner):
    """Runs the checklist against domain controllers, one after another."""

    SCANNER_NAME = "domaincontroller"
    SCANNER_DESCRIPTION = "Domain controller service and dcdiag health checks"
    LOG_CATEGORY = 'Check'

    def __init__(self, checks: List[Check], inventory=None,
                 timeout: float = DEFAULT_TIMEOUT,
                 error_log_days: int = 1,
                 event_log_name: str = 'Directory Service',
                 event_level: int = 2,
                 probe: Callable[[str], bool] = is_reachable,
                 logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self.checks = list(checks)
        self.inventory = inventory
        self.timeout = timeout
        self.error_log_days = error_log_days
        self.event_log_name = event_log_name
        self.event_level = event_level
        self.probe = probe

    def scan(self, targets: List[DomainController], **kwargs) -> List[DCResult]:
        """Check every target sequentially."""
        self.logger.info(
            f"[{self.SCANNER_NAME}] {self.SCANNER_DESCRIPTION}: "
            f"{len(targets)} target(s), {len(self.checks)} check(s) each")
        return [self.scan_one(dc) for dc in targets]

    def scan_one(self, dc: DomainController) -> DCResult:
        host = dc.hostname
        self.logger.info(f"Checking {host}")

        if not self.probe(host):
            self.logger.warning(f"{host} is unreachable, skipping all checks")
            return DCResult(
                controller=dc,
                reachable=False,
                results=[(check.name, CheckOutcome.FAILURE) for check in self.checks],
            )

        result = DCResult(controller=dc, reachable=True)
        for check in self.checks:
            result.results.append((check.name, self.run_check(host, check)))

        if self.inventory is not None:
            try:
                result.attributes = self.inventory.attributes_of(dc)
            except DCHealthError as e:
                self.logger.error(f"Could not read attributes of {host}: {e}")
                result.attributes_error = str(e)

        result.error_count, result.error_count_error = self.count_errors(host)
        return result

    # -----------------------------------------------------------------------
    # Checks
    # -----------------------------------------------------------------------

    def run_check(self, host: str, check: Check) -> CheckOutcome:
        return run_with_timeout(
            lambda: self._execute(host, check),
            self.timeout,
            description=f"{check.name} on {host}",
            logger=self.logger,
        )

    def _execute(self, host: str, check: Check) -> bool:
        if check.kind == SERVICE:
            return service_running(self.query_service(host, check.target))
        return diagnostic_passed(self.run_diagnostic(host, check.target), check.target)

    def query_service(self, host: str, service: str) -> str:
        """Current status of a Windows service on the DC ('Running', 'Stopped', ...)."""
        return self._run_ps(
            f"(Get-Service -ComputerName {ps_quote(host)} -Name {ps_quote(service)} "
            f"-ErrorAction Stop).Status.ToString()",
            timeout=self.timeout,
        )

    def run_diagnostic(self, host: str, test: str) -> str:
        """Raw dcdiag output for one test."""
        proc = self.run_tool(
            [self._resolve_tool('dcdiag'), f'/s:{host}', f'/test:{test}'],
            description='dcdiag',
            timeout=self.timeout,
        )
        return proc.stdout or ''

    # -----------------------------------------------------------------------
    # Event log
    # -----------------------------------------------------------------------

    def count_errors(self, host: str) -> Tuple[Optional[int], Optional[str]]:
        """Count events at the configured level within the trailing window.

        Returns (count, None) or (None, reason). Never raises.
        """
        # Window runs from now back to now - days
        offset = -abs(self.error_log_days)
        script = (
            f"$start = (Get-Date).AddDays({offset}); "
            f"try {{ @(Get-WinEvent -ComputerName {ps_quote(host)} -FilterHashtable "
            f"@{{LogName={ps_quote(self.event_log_name)}; Level={int(self.event_level)}; "
            f"StartTime=$start}} -ErrorAction Stop).Count }} "
            f"catch {{ if ($_.FullyQualifiedErrorId -like 'NoMatchingEventsFound*') "
            f"{{ 0 }} else {{ throw }} }}"
        )
        try:
            raw = self._run_ps(script, timeout=self.timeout)
            count = int(raw.strip().splitlines()[-1]) if raw.strip() else 0
        except RemoteCommandError as e:
            self.logger.error(f"Event log query on {host} failed: {e.reason}")
            return None, e.reason
        except ValueError:
            self.logger.error(f"Event log query on {host} returned {raw!r}")
            return None, f"Unexpected output: {raw[:80]}"

        self.logger.info(
            f"{host}: {count} '{self.event_log_name}' error(s) in the last "
            f"{abs(self.error_log_days)} day(s)")
        return count, None

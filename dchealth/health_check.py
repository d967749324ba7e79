#!/usr/bin/env python3
"""
DC Health Report - Run Orchestrator
Walks the inventory (forest -> domains -> DCs), probes each level and
collects everything into a ForestReport for the renderer.
"""

import logging
from typing import Callable, Optional

from .exceptions import DiscoveryError
from .inventory import DirectoryInventory
from .logger import get_logger
from .models import DomainReport, ForestReport
from .network import is_reachable
from .scanners.dc_scanner import DomainControllerScanner


class ForestHealthCheck:
    """One health check run over a forest."""

    def __init__(self, inventory: DirectoryInventory,
                 scanner: DomainControllerScanner,
                 probe: Callable[[str], bool] = is_reachable,
                 logger: Optional[logging.Logger] = None):
        self.inventory = inventory
        self.scanner = scanner
        self.probe = probe
        self.logger = logger or get_logger('Inventory')

    def run(self) -> ForestReport:
        report = ForestReport(
            forest=None,
            reachable=False,
            check_names=[check.name for check in self.scanner.checks],
            error_log_days=abs(self.scanner.error_log_days),
        )

        try:
            report.forest = self.inventory.forest_info()
        except DiscoveryError as e:
            self.logger.error(f"Could not read forest information: {e}")

        if report.forest is not None:
            report.reachable = self.probe(report.forest.root_domain or report.forest.name)

        try:
            domains = self.inventory.list_domains()
        except DiscoveryError as e:
            self.logger.error(f"Could not enumerate domains: {e}")
            domains = []

        for domain in domains:
            domain_report = DomainReport(info=domain, reachable=self.probe(domain.name))
            try:
                controllers = self.inventory.list_domain_controllers(domain.name)
            except DiscoveryError as e:
                self.logger.error(
                    f"Could not enumerate domain controllers of {domain.name}: {e}")
                controllers = []

            domain_report.controllers = self.scanner.scan(controllers)
            report.domains.append(domain_report)

        self.logger.info(
            f"Checked {len(report.targets)} domain controller(s) "
            f"in {len(report.domains)} domain(s)")
        return report

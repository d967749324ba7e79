#!/usr/bin/env python3
"""
Run orchestration: discovery, per-level probes and result collection.

Usage:
    python -m pytest tests/test_health_check.py -v
"""

import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
os.environ.setdefault('DC_HEALTH_HOME', tempfile.mkdtemp(prefix='dc-health-test-'))

from dchealth.checks import build_checklist
from dchealth.exceptions import DiscoveryError
from dchealth.health_check import ForestHealthCheck
from dchealth.inventory import StaticInventory
from dchealth.models import CheckOutcome
from dchealth.scanners.dc_scanner import DomainControllerScanner
from dchealth.utilities.reporter import HealthReportBuilder

INVENTORY = {
    'forest': {'name': 'corp.example.com', 'root_domain': 'corp.example.com'},
    'domains': [{
        'name': 'corp.example.com',
        'domain_controllers': [
            {'hostname': 'dc01.corp.example.com'},
            {'hostname': 'dc02.corp.example.com'},
            {'hostname': 'dc03.corp.example.com'},
        ],
    }],
}

UNREACHABLE = {'dc03.corp.example.com'}


def probe(host):
    return host not in UNREACHABLE


class TestForestHealthCheck(unittest.TestCase):

    def setUp(self):
        self.inventory = StaticInventory(INVENTORY)
        checks = build_checklist(['DNS', 'NTDS', 'Netlogon'],
                                 ['Netlogons', 'Replications', 'Services', 'Advertising',
                                  'FSMOCheck', 'SysVolCheck', 'KnowsOfRoleHolders'])
        self.scanner = DomainControllerScanner(checks, inventory=self.inventory,
                                               timeout=5, probe=probe)
        for name, value in (('_execute', True), ('count_errors', (0, None))):
            patcher = mock.patch.object(self.scanner, name, return_value=value)
            setattr(self, name.strip('_'), patcher.start())
            self.addCleanup(patcher.stop)

    def test_three_controllers_one_unreachable(self):
        report = ForestHealthCheck(self.inventory, self.scanner, probe=probe).run()

        self.assertEqual(len(report.targets), 3)
        by_host = {dc.hostname: dc for dc in report.targets}
        offline = by_host['dc03.corp.example.com']
        self.assertFalse(offline.reachable)
        self.assertEqual(len(offline.results), 10)
        self.assertTrue(all(o is CheckOutcome.FAILURE for _, o in offline.results))

        for host in ('dc01.corp.example.com', 'dc02.corp.example.com'):
            self.assertTrue(all(o is CheckOutcome.SUCCESS for _, o in by_host[host].results))

        # 10 checks on each of the two reachable DCs only
        self.assertEqual(self.execute.call_count, 20)
        self.assertEqual(self.count_errors.call_count, 2)

    def test_report_metadata(self):
        report = ForestHealthCheck(self.inventory, self.scanner, probe=probe).run()
        self.assertTrue(report.reachable)
        self.assertEqual(report.forest.name, 'corp.example.com')
        self.assertEqual(len(report.check_names), 10)
        self.assertEqual(report.check_names[0], 'DNS Service')

    def test_unreachable_forest_and_domain(self):
        report = ForestHealthCheck(self.inventory, self.scanner,
                                   probe=lambda host: host.startswith('dc0')).run()
        self.assertFalse(report.reachable)
        self.assertFalse(report.domains[0].reachable)
        self.assertEqual(len(report.targets), 3)

    def test_forest_discovery_failure_continues(self):
        inventory = mock.Mock()
        inventory.forest_info.side_effect = DiscoveryError('Unable to find a default server')
        inventory.list_domains.side_effect = DiscoveryError('Unable to find a default server')

        report = ForestHealthCheck(inventory, self.scanner, probe=probe).run()

        self.assertIsNone(report.forest)
        self.assertFalse(report.reachable)
        self.assertEqual(report.targets, [])

    def test_domains_scanned_without_forest_metadata(self):
        inventory = StaticInventory({'domains': INVENTORY['domains']})

        report = ForestHealthCheck(inventory, self.scanner, probe=probe).run()
        html = HealthReportBuilder().build(report)

        self.assertIsNone(report.forest)
        self.assertEqual(len(report.targets), 3)
        self.assertIn('Domain Controller: dc01.corp.example.com', html)

    def test_domain_controller_discovery_failure_continues(self):
        inventory = mock.Mock(wraps=self.inventory)
        inventory.list_domain_controllers.side_effect = DiscoveryError('Access denied')

        report = ForestHealthCheck(inventory, self.scanner, probe=probe).run()

        self.assertEqual(len(report.domains), 1)
        self.assertEqual(report.domains[0].controllers, [])


if __name__ == '__main__':
    unittest.main(verbosity=2)

#!/usr/bin/env python3
"""
Checklist construction, success predicates and the wait-with-timeout runner.

Usage:
    python -m pytest tests/test_checks.py -v
"""

import os
import subprocess
import sys
import tempfile
import threading
import time
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
os.environ.setdefault('DC_HEALTH_HOME', tempfile.mkdtemp(prefix='dc-health-test-'))

from dchealth.checks import (DIAGNOSTIC, SERVICE, build_checklist,
                             diagnostic_passed, run_with_timeout,
                             service_running)
from dchealth.config import Config
from dchealth.models import CheckOutcome


class TestChecklist(unittest.TestCase):

    def test_services_come_first(self):
        checks = build_checklist(['DNS', 'NTDS'], ['Replications'])
        self.assertEqual([c.kind for c in checks], [SERVICE, SERVICE, DIAGNOSTIC])

    def test_column_names(self):
        checks = build_checklist(['Netlogon'], ['Netlogons'])
        self.assertEqual([c.name for c in checks], ['Netlogon Service', 'Netlogons'])

    def test_default_checklist_has_ten_columns(self):
        tmpdir = tempfile.mkdtemp()
        config = Config(Path(tmpdir) / 'config.yaml')
        checks = build_checklist(config.get_service_checks(), config.get_diagnostic_checks())
        self.assertEqual(len(checks), 10)
        self.assertEqual(len({c.name for c in checks}), 10)


class TestPredicates(unittest.TestCase):

    def test_diagnostic_marker_present(self):
        output = ("Testing server: Default-First-Site-Name\\DC01\n"
                  "   Starting test: Replications\n"
                  "   ......................... DC01 passed test Replications\n")
        self.assertTrue(diagnostic_passed(output, 'Replications'))

    def test_diagnostic_marker_absent(self):
        output = "   ......................... DC01 failed test Replications\n"
        self.assertFalse(diagnostic_passed(output, 'Replications'))

    def test_diagnostic_marker_for_other_test(self):
        output = "   ......................... DC01 passed test Advertising\n"
        self.assertFalse(diagnostic_passed(output, 'Replications'))

    def test_diagnostic_empty_output(self):
        self.assertFalse(diagnostic_passed('', 'Replications'))
        self.assertFalse(diagnostic_passed(None, 'Replications'))

    def test_service_running(self):
        self.assertTrue(service_running('Running\r\n'))
        self.assertFalse(service_running('Stopped'))
        self.assertFalse(service_running(None))


class TestRunWithTimeout(unittest.TestCase):

    def setUp(self):
        self.release = threading.Event()

    def tearDown(self):
        # Let abandoned workers finish
        self.release.set()

    def test_success_within_deadline(self):
        self.assertEqual(run_with_timeout(lambda: True, 5), CheckOutcome.SUCCESS)

    def test_failure_within_deadline(self):
        self.assertEqual(run_with_timeout(lambda: False, 5), CheckOutcome.FAILURE)

    def test_exception_is_failure(self):
        def boom():
            raise RuntimeError("RPC server unavailable")
        self.assertEqual(run_with_timeout(boom, 5), CheckOutcome.FAILURE)

    def test_slow_work_times_out(self):
        def slow():
            self.release.wait(5)
            return True
        self.assertEqual(run_with_timeout(slow, 0.05), CheckOutcome.TIMEOUT)

    def test_timeout_ignores_eventual_result(self):
        results = []

        def slow_failure():
            self.release.wait(5)
            results.append('finished')
            return False

        self.assertEqual(run_with_timeout(slow_failure, 0.05), CheckOutcome.TIMEOUT)
        self.assertEqual(results, [])

    def test_abandoned_check_does_not_block_exit(self):
        script = (
            "import time\n"
            "from dchealth.checks import run_with_timeout\n"
            "print(run_with_timeout(lambda: time.sleep(8) or True, 0.2).name)\n"
        )
        env = dict(os.environ, PYTHONPATH=str(PROJECT_ROOT))
        started = time.monotonic()
        proc = subprocess.run([sys.executable, '-c', script], capture_output=True,
                              text=True, timeout=30, env=env, cwd=str(PROJECT_ROOT))
        elapsed = time.monotonic() - started

        self.assertEqual(proc.returncode, 0, proc.stderr)
        self.assertEqual(proc.stdout.strip(), 'TIMEOUT')
        self.assertLess(elapsed, 5)

    def test_outcome_labels(self):
        self.assertEqual(CheckOutcome.SUCCESS.css_class, 'success')
        self.assertEqual(CheckOutcome.TIMEOUT.css_class, 'timeout')
        self.assertEqual(CheckOutcome.FAILURE.label, 'Failed')


if __name__ == '__main__':
    unittest.main(verbosity=2)

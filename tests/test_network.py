#!/usr/bin/env python3
"""
Reachability probe: one ping, no retry.

Usage:
    python -m pytest tests/test_network.py -v
"""

import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
os.environ.setdefault('DC_HEALTH_HOME', tempfile.mkdtemp(prefix='dc-health-test-'))

from dchealth.network import build_ping_command, is_reachable


def completed(returncode=0, stdout=''):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr='')


class TestReachability(unittest.TestCase):

    def test_command_is_single_echo(self):
        for platform, expected in (('win32', ['ping', '-n', '1', '-w', '1000', 'dc01']),
                                   ('linux', ['ping', '-c', '1', '-W', '1', 'dc01'])):
            with mock.patch('dchealth.network.sys.platform', platform):
                self.assertEqual(build_ping_command('dc01'), expected)

    @mock.patch('subprocess.run')
    def test_reply(self, run):
        run.return_value = completed(0, 'Reply from 10.0.0.10: bytes=32 time<1ms TTL=128')
        self.assertTrue(is_reachable('dc01'))
        run.assert_called_once()

    @mock.patch('subprocess.run')
    def test_no_reply_is_not_retried(self, run):
        run.return_value = completed(1, 'Request timed out.')
        self.assertFalse(is_reachable('dc01'))
        run.assert_called_once()

    @mock.patch('subprocess.run')
    def test_destination_unreachable_reply(self, run):
        run.return_value = completed(0, 'Reply from 10.0.0.1: Destination host unreachable.')
        self.assertFalse(is_reachable('dc01'))

    @mock.patch('subprocess.run')
    def test_hung_ping(self, run):
        run.side_effect = subprocess.TimeoutExpired('ping', 5)
        self.assertFalse(is_reachable('dc01'))

    @mock.patch('subprocess.run')
    def test_missing_ping(self, run):
        run.side_effect = FileNotFoundError('ping')
        self.assertFalse(is_reachable('dc01'))


if __name__ == '__main__':
    unittest.main(verbosity=2)

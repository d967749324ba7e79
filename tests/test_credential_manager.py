#!/usr/bin/env python3
"""
Sealed mail password: Fernet round trip, key sources and failure modes.

Usage:
    python -m pytest tests/test_credential_manager.py -v
"""

import os
import stat
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from cryptography.fernet import Fernet

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
os.environ.setdefault('DC_HEALTH_HOME', tempfile.mkdtemp(prefix='dc-health-test-'))

from dchealth.credential_manager import KEY_ENV_VAR, CredentialSealer
from dchealth.exceptions import CredentialError


class TestCredentialSealer(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        env = mock.patch.dict(os.environ)
        env.start()
        self.addCleanup(env.stop)
        os.environ.pop(KEY_ENV_VAR, None)

        home = Path(self.tmpdir.name)
        self.cred_file = home / 'mail.cred'
        self.key_file = home / '.cred_key'
        self.sealer = CredentialSealer(cred_file=self.cred_file, key_file=self.key_file)

    def test_round_trip(self):
        path = self.sealer.seal('S3cret!')
        self.assertEqual(path, self.cred_file)
        self.assertEqual(self.sealer.unseal(), 'S3cret!')

    def test_file_is_not_plaintext(self):
        self.sealer.seal('S3cret!')
        self.assertNotIn(b'S3cret!', self.cred_file.read_bytes())

    @unittest.skipIf(sys.platform == 'win32', 'POSIX permissions')
    def test_files_are_owner_only(self):
        self.sealer.seal('S3cret!')
        for path in (self.cred_file, self.key_file):
            self.assertEqual(stat.S_IMODE(path.stat().st_mode), 0o600)

    def test_environment_key_is_preferred(self):
        key = Fernet.generate_key()
        os.environ[KEY_ENV_VAR] = key.decode()

        self.sealer.seal('S3cret!')

        self.assertFalse(self.key_file.exists())
        self.assertEqual(Fernet(key).decrypt(self.cred_file.read_bytes()), b'S3cret!')

    def test_other_key_cannot_unseal(self):
        self.sealer.seal('S3cret!')
        self.key_file.write_bytes(Fernet.generate_key())

        with self.assertRaises(CredentialError):
            self.sealer.unseal()

    def test_missing_password_file(self):
        with self.assertRaises(CredentialError) as ctx:
            self.sealer.unseal()
        self.assertIn('--create-password-file', str(ctx.exception))

    def test_missing_key_on_unseal(self):
        self.sealer.seal('S3cret!')
        self.key_file.unlink()
        with self.assertRaises(CredentialError):
            self.sealer.unseal()

    def test_malformed_key(self):
        os.environ[KEY_ENV_VAR] = 'not-a-fernet-key'
        with self.assertRaises(CredentialError):
            self.sealer.seal('S3cret!')

    def test_empty_secret_rejected(self):
        with self.assertRaises(CredentialError):
            self.sealer.seal('')
        self.assertFalse(self.cred_file.exists())

    def test_reseal_overwrites(self):
        self.sealer.seal('first')
        self.sealer.seal('second')
        self.assertEqual(self.sealer.unseal(), 'second')


if __name__ == '__main__':
    unittest.main(verbosity=2)

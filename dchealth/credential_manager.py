#!/usr/bin/env python3
"""
DC Health Report - Credential Manager
Seals the SMTP password with Fernet so that only the account that created
it can read it back. The key comes from DC_HEALTH_KEY when set, otherwise
from an owner-only key file in the state directory.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from .exceptions import CredentialError
from .logger import get_logger
from .paths import paths

KEY_ENV_VAR = 'DC_HEALTH_KEY'


def _restrict(path: Path):
    """Owner read/write only."""
    if sys.platform != 'win32':
        os.chmod(str(path), 0o600)


class CredentialSealer:
    """Seals and unseals the mail password file."""

    def __init__(self, cred_file: Optional[Path] = None,
                 key_file: Optional[Path] = None,
                 logger: Optional[logging.Logger] = None):
        self.cred_file = Path(cred_file) if cred_file else paths.credential_file
        self.key_file = Path(key_file) if key_file else paths.key_file
        self.logger = logger or get_logger('Credential')

    def _fernet(self, create: bool) -> Fernet:
        """Key from the environment, else the key file (generated on first seal)."""
        try:
            env_key = os.environ.get(KEY_ENV_VAR)
            if env_key:
                return Fernet(env_key.encode())

            if self.key_file.exists():
                return Fernet(self.key_file.read_bytes().strip())

            if not create:
                raise CredentialError(f"Encryption key not found: {self.key_file}")

            key = Fernet.generate_key()
            self.key_file.parent.mkdir(parents=True, exist_ok=True)
            self.key_file.write_bytes(key)
            _restrict(self.key_file)
            self.logger.info(f"Generated new encryption key at {self.key_file}")
            return Fernet(key)
        except (OSError, ValueError) as e:
            raise CredentialError(f"Unusable encryption key: {e}") from e

    def seal(self, secret: str) -> Path:
        """Encrypt the secret and write it to the credential file."""
        if not secret:
            raise CredentialError("Refusing to seal an empty password")

        token = self._fernet(create=True).encrypt(secret.encode('utf-8'))
        try:
            self.cred_file.parent.mkdir(parents=True, exist_ok=True)
            self.cred_file.write_bytes(token)
            _restrict(self.cred_file)
        except OSError as e:
            raise CredentialError(f"Could not write {self.cred_file}: {e}") from e

        self.logger.info(f"Sealed credential written to {self.cred_file}")
        return self.cred_file

    def unseal(self) -> str:
        """Decrypt the credential file. The plaintext stays in memory only."""
        if not self.cred_file.exists():
            raise CredentialError(
                f"Password file not found: {self.cred_file} "
                f"(create it with --create-password-file)")

        fernet = self._fernet(create=False)
        try:
            return fernet.decrypt(self.cred_file.read_bytes().strip()).decode('utf-8')
        except InvalidToken as e:
            raise CredentialError(
                "Password file was sealed with a different key or account") from e
        except OSError as e:
            raise CredentialError(f"Could not read {self.cred_file}: {e}") from e

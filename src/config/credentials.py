"""FTP passwords kept in the system keyring.

One keyring entry per ``username@host``, under the service name of the
client. Keyring backends that are missing or locked are treated as an
empty store.
"""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger("ftp_session.credentials")


class CredentialManager:
    """Looks up and stores FTP passwords in the keyring."""

    SERVICE_NAME = "ftp-session-client"

    @staticmethod
    def _account(host: str, username: str) -> str:
        return f"{username}@{host}"

    def save_password(self, host: str, username: str, password: str) -> bool:
        """Store ``password`` for the account; False if the keyring refused it."""
        try:
            keyring.set_password(self.SERVICE_NAME, self._account(host, username), password)
        except KeyringError as e:
            logger.warning(f"Keyring unavailable, password for {username} not stored: {e}")
            return False
        return True

    def get_password(self, host: str, username: str) -> Optional[str]:
        """Stored password for the account, or None."""
        try:
            return keyring.get_password(self.SERVICE_NAME, self._account(host, username))
        except KeyringError as e:
            logger.debug(f"Keyring lookup for {username} failed: {e}")
            return None

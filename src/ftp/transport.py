"""Transport driver for the FTP session.

Thin adapter over ftplib.FTP. Opening the control connection and
logging in raise session exceptions; every other verb reports its
outcome as a return value so the session can apply its best-effort
policy.
"""

import logging
import socket
from ftplib import FTP, all_errors, error_perm
from typing import BinaryIO, Callable, List, Optional

from src.ftp.exceptions import (
    FTPAuthenticationError,
    FTPConnectionError,
    FTPTimeoutError,
)

logger = logging.getLogger("ftp_session.transport")


class FTPTransport:
    """Owns one ftplib control connection."""

    # Block size for FTP transfers (8KB)
    BLOCK_SIZE = 8192

    def __init__(self):
        """Initialize an unopened transport."""
        self._ftp: Optional[FTP] = None

    @property
    def is_open(self) -> bool:
        """True while the control connection is held."""
        return self._ftp is not None

    def open(self, host: str, port: int = 21, timeout: float = 10) -> None:
        """
        Open the control connection.

        Args:
            host: Server host name or address
            port: Server port
            timeout: Socket timeout in seconds

        Raises:
            FTPTimeoutError: If the server does not answer in time
            FTPConnectionError: If the connection cannot be established
        """
        ftp = FTP()
        ftp.set_debuglevel(0)

        try:
            ftp.connect(host=host, port=port, timeout=timeout)
        except socket.timeout:
            raise FTPTimeoutError(host, port, timeout)
        except all_errors as e:
            raise FTPConnectionError(host, port, e)

        self._ftp = ftp
        logger.debug(f"Control connection open to {host}:{port}")

    def close(self) -> None:
        """Close the control connection. Safe to call more than once."""
        if self._ftp is None:
            return

        try:
            self._ftp.quit()
        except all_errors:
            # Best effort close
            try:
                self._ftp.close()
            except all_errors:
                pass

        self._ftp = None
        logger.debug("Control connection closed")

    def login(self, username: str, password: str) -> None:
        """
        Authenticate on the control connection.

        Raises:
            FTPAuthenticationError: If the server rejects the credentials
        """
        try:
            self._ftp.login(user=username, passwd=password)
        except all_errors as e:
            raise FTPAuthenticationError(username, e)

    def set_passive(self, enabled: bool) -> bool:
        """Select passive or active data connections."""
        try:
            self._ftp.set_pasv(enabled)
            return True
        except all_errors as e:
            logger.warning(f"Could not set passive mode to {enabled}: {e}")
            return False

    def execute(self, verb: str, *args: str) -> Optional[List[str]]:
        """
        Send a raw verb and return the response lines.

        Args:
            verb: Command verb, e.g. "FEAT"
            *args: Verb arguments

        Returns:
            Response split into lines, or None if the verb failed
        """
        command = " ".join((verb,) + args)
        try:
            response = self._ftp.sendcmd(command)
        except all_errors as e:
            logger.debug(f"{verb} failed: {e}")
            return None
        return response.splitlines()

    def list_raw(self, path: str) -> Optional[List[str]]:
        """
        Fetch a LIST of the given path.

        Returns:
            Raw listing lines, or None if the server refused
        """
        lines: List[str] = []
        try:
            self._ftp.retrlines(f"LIST {path}", lines.append)
        except all_errors as e:
            logger.debug(f"LIST {path} failed: {e}")
            return None
        return lines

    def retrieve(self, path: str, write: Callable[[bytes], object]) -> bool:
        """Stream a remote file in binary mode into ``write``."""
        try:
            self._ftp.retrbinary(f"RETR {path}", write, blocksize=self.BLOCK_SIZE)
            return True
        except all_errors as e:
            logger.warning(f"Download of {path} failed: {e}")
            return False

    def store(self, path: str, source: BinaryIO) -> bool:
        """Stream a binary file object to a remote path."""
        try:
            self._ftp.storbinary(f"STOR {path}", source, blocksize=self.BLOCK_SIZE)
            return True
        except all_errors as e:
            logger.warning(f"Upload to {path} failed: {e}")
            return False

    def retrieve_to_file(self, path: str, local_path: str) -> bool:
        """Download a remote file straight into a local file."""
        try:
            with open(local_path, "wb") as f:
                return self.retrieve(path, f.write)
        except OSError as e:
            logger.warning(f"Cannot write local file {local_path}: {e}")
            return False

    def store_from_file(self, local_path: str, path: str) -> bool:
        """Upload a local file to a remote path."""
        try:
            with open(local_path, "rb") as f:
                return self.store(path, f)
        except OSError as e:
            logger.warning(f"Cannot read local file {local_path}: {e}")
            return False

    def delete(self, path: str) -> bool:
        """Delete a remote file."""
        return self._simple("DELE", self._ftp.delete, path)

    def make_directory(self, path: str) -> bool:
        """Create a remote directory."""
        return self._simple("MKD", self._ftp.mkd, path)

    def remove_directory(self, path: str) -> bool:
        """Remove an empty remote directory."""
        return self._simple("RMD", self._ftp.rmd, path)

    def rename(self, from_path: str, to_path: str) -> bool:
        """Rename or move a remote object."""
        return self._simple("RNFR/RNTO", self._ftp.rename, from_path, to_path)

    def _simple(self, verb: str, func: Callable, *args: str) -> bool:
        try:
            func(*args)
            return True
        except error_perm as e:
            logger.debug(f"{verb} {' '.join(args)} refused: {e}")
            return False
        except all_errors as e:
            logger.warning(f"{verb} {' '.join(args)} failed: {e}")
            return False

"""FTP session management.

Provides SessionState enum, FTPConnectionConfig dataclass and the
FTPSession class: the connect/login state machine plus every single
object file operation. Recursive tree operations are delegated to
TreeSynchronizer.
"""

import io
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Set, Union

from src.ftp.exceptions import (
    FTPAuthenticationError,
    FTPListingError,
    FTPNotConnectedError,
    FTPNotLoggedInError,
)
from src.ftp.listing import ListingEntry, parse_listing
from src.ftp.paths import PathResolver
from src.ftp.sync import SyncResult, TreeSynchronizer
from src.ftp.transport import FTPTransport
from src.local.filesystem import LocalFilesystem

logger = logging.getLogger("ftp_session.session")

# Status code opening a successful FEAT reply
FEATURES_STATUS = "211"


class SessionState(Enum):
    """FTP session state."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"


@dataclass
class FTPConnectionConfig:
    """FTP connection configuration."""
    host: str
    port: int = 21
    username: str = "anonymous"
    passive_mode: bool = True
    timeout: int = 10

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.host:
            raise ValueError("Host is required")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {self.port}")
        if not 1 <= self.timeout <= 300:
            raise ValueError(f"Timeout must be between 1 and 300, got {self.timeout}")


class FTPSession:
    """
    A single logical FTP session.

    Owns exactly one transport while connected. Operations are blocking
    and must not be invoked concurrently on the same session.

    Usage:
        with FTPSession() as session:
            session.connect("ftp.example.com")
            session.login("user", "secret")
            entries = session.list("/pub")
    """

    def __init__(
        self,
        transport_factory: Callable[[], FTPTransport] = FTPTransport,
        filesystem: Optional[LocalFilesystem] = None,
    ):
        """
        Initialize a disconnected session.

        Args:
            transport_factory: Builds the transport opened by connect()
            filesystem: Local filesystem used by tree operations
        """
        self._transport_factory = transport_factory
        self._filesystem = filesystem or LocalFilesystem()
        self._transport: Optional[FTPTransport] = None
        self._resolver = PathResolver()
        self._features: Set[str] = set()
        self._passive = True
        self._state = SessionState.DISCONNECTED

    def __enter__(self) -> "FTPSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """True if a control connection is held."""
        return self._state != SessionState.DISCONNECTED and self._transport is not None

    @property
    def is_authenticated(self) -> bool:
        """True after a successful login on the current connection."""
        return self.is_connected and self._state == SessionState.AUTHENTICATED

    @property
    def features(self) -> Set[str]:
        """Feature lines advertised by the server's FEAT reply."""
        return set(self._features)

    @property
    def passive_mode(self) -> bool:
        """Requested data connection mode."""
        return self._passive

    @property
    def current_directory(self) -> str:
        """Client-side remote working directory."""
        return self._resolver.current_directory

    @property
    def filesystem(self) -> LocalFilesystem:
        """Local filesystem used by tree operations."""
        return self._filesystem

    def has_feature(self, name: str) -> bool:
        """True if a FEAT line names the given feature."""
        name = name.upper()
        return any(f.split(" ", 1)[0].upper() == name for f in self._features)

    # Connection lifecycle

    def connect(
        self,
        host: str,
        port: int = 21,
        passive: bool = True,
        timeout: float = 10,
    ) -> None:
        """
        Open the control connection and query server features.

        A session that is already connected is disconnected first.

        Args:
            host: Server host
            port: Server port
            passive: Passive mode preference, applied after login
            timeout: Connect timeout in seconds

        Raises:
            FTPConnectionError: If connection fails
            FTPTimeoutError: If connection times out
        """
        if self.is_connected:
            logger.debug("Dropping previous connection before reconnecting")
            self.disconnect()

        transport = self._transport_factory()
        try:
            transport.open(host, port, timeout)
        except Exception:
            self._reset()
            raise

        self._transport = transport
        self._passive = passive
        self._state = SessionState.CONNECTED
        logger.info(f"Connected to {host}:{port}")

        self._features = self._query_features()

    def login(self, username: str, password: str) -> None:
        """
        Authenticate the connected session.

        Raises:
            FTPNotConnectedError: If not connected
            FTPAuthenticationError: If the server rejects the credentials
        """
        self._require("Login", login=False)

        self._transport.login(username, password)

        self._state = SessionState.AUTHENTICATED
        logger.info(f"Logged in as '{username}'")

        # Servers only honour the mode after authentication
        self.set_passive_mode(self._passive)

    def open(self, config: FTPConnectionConfig, password: str = "") -> None:
        """
        Connect and log in from a configuration.

        The session is left disconnected if login fails.

        Raises:
            FTPConnectionError: If connection fails
            FTPAuthenticationError: If login fails
        """
        self.connect(
            config.host,
            port=config.port,
            passive=config.passive_mode,
            timeout=config.timeout,
        )
        try:
            self.login(config.username, password)
        except FTPAuthenticationError:
            self.disconnect()
            raise

    def set_passive_mode(self, enabled: bool) -> None:
        """
        Switch between passive and active data connections.

        Raises:
            FTPNotConnectedError: If not connected
            FTPNotLoggedInError: If not logged in
        """
        self._require("Set passive mode")
        self._passive = enabled
        self._transport.set_passive(enabled)

    def disconnect(self) -> None:
        """Close the connection. Safe to call repeatedly."""
        if self._transport is not None:
            self._transport.close()
            logger.info("Disconnected")
        self._reset()

    def _reset(self) -> None:
        self._transport = None
        self._features = set()
        self._passive = True
        self._resolver.reset()
        self._state = SessionState.DISCONNECTED

    def _query_features(self) -> Set[str]:
        lines = self._transport.execute("FEAT")
        if not lines or not lines[0].startswith(FEATURES_STATUS):
            logger.debug("Server did not report features")
            return set()

        features = {line.strip() for line in lines[1:-1] if line.strip()}
        logger.debug(f"Server features: {sorted(features)}")
        return features

    def _require(self, operation: str, login: bool = True) -> None:
        if not self.is_connected:
            raise FTPNotConnectedError(operation)
        if login and not self.is_authenticated:
            raise FTPNotLoggedInError(operation)

    # Paths

    def resolve(self, path: str) -> str:
        """Resolve a path against the working directory."""
        return self._resolver.resolve(path)

    def change_directory(self, path: str) -> str:
        """
        Change the client-side working directory.

        No command is sent to the server and the directory is not
        checked for existence.

        Returns:
            The new absolute working directory
        """
        return self._resolver.change_directory(path)

    # File operations

    def list(self, directory: str = ".") -> List[ListingEntry]:
        """
        List a remote directory.

        Args:
            directory: Directory to list, default the working directory

        Returns:
            Parsed entries, possibly empty

        Raises:
            FTPListingError: If the server refuses the listing
        """
        self._require("List")
        directory = self.resolve(directory)

        lines = self._transport.list_raw(directory)
        if lines is None:
            raise FTPListingError(directory)

        return parse_listing(lines)

    def download_to_memory(self, remote_file: str) -> bytes:
        """
        Download a remote file into memory.

        Returns:
            File contents, or empty bytes if the transfer failed
        """
        self._require("Download")
        remote_file = self.resolve(remote_file)

        buffer = io.BytesIO()
        if not self._transport.retrieve(remote_file, buffer.write):
            return b""
        return buffer.getvalue()

    def download_to_file(self, remote_file: str, local_file: str) -> bool:
        """Download a remote file to a local path."""
        self._require("Download")
        remote_file = self.resolve(remote_file)

        ok = self._transport.retrieve_to_file(remote_file, local_file)
        if ok:
            logger.debug(f"Downloaded {remote_file} to {local_file}")
        return ok

    def upload_from_memory(self, contents: Union[bytes, str], remote_file: str) -> bool:
        """
        Upload an in-memory buffer to a remote file.

        Args:
            contents: Bytes to store; text is encoded as UTF-8
            remote_file: Destination path
        """
        self._require("Upload")
        remote_file = self.resolve(remote_file)

        if isinstance(contents, str):
            contents = contents.encode("utf-8")

        return self._transport.store(remote_file, io.BytesIO(contents))

    def upload_from_file(self, local_file: str, remote_file: str = "") -> bool:
        """
        Upload a local file.

        Args:
            local_file: Local source path
            remote_file: Destination path; defaults to the local base
                name in the working directory
        """
        self._require("Upload")

        if not remote_file:
            remote_file = os.path.basename(str(local_file))
        remote_file = self.resolve(remote_file)

        ok = self._transport.store_from_file(str(local_file), remote_file)
        if ok:
            logger.debug(f"Uploaded {local_file} to {remote_file}")
        return ok

    def change_file(
        self,
        remote_file: str,
        callback: Callable[[bytes], Optional[Union[bytes, str]]],
    ) -> bool:
        """
        Rewrite a remote file through a callback.

        The file is downloaded, its contents passed to ``callback`` and
        the returned contents uploaded back to the same path. Returning
        None from the callback leaves the file untouched.

        Returns:
            True if new contents were uploaded
        """
        self._require("Change file")
        remote_file = self.resolve(remote_file)

        new_contents = callback(self.download_to_memory(remote_file))
        if new_contents is None:
            return False

        return self.upload_from_memory(new_contents, remote_file)

    def delete_file(self, remote_file: str) -> bool:
        """Delete a remote file."""
        self._require("Delete")
        return self._transport.delete(self.resolve(remote_file))

    def create_directory(self, remote_dir: str) -> bool:
        """Create a remote directory."""
        self._require("Create directory")
        return self._transport.make_directory(self.resolve(remote_dir))

    def remove_directory(self, remote_dir: str) -> bool:
        """Remove an empty remote directory."""
        self._require("Remove directory")
        return self._transport.remove_directory(self.resolve(remote_dir))

    def rename(self, from_path: str, to_path: str) -> bool:
        """Rename or move a remote file or directory."""
        self._require("Rename")
        return self._transport.rename(self.resolve(from_path), self.resolve(to_path))

    # Tree operations

    def delete_directory_recursive(self, remote_dir: str, strict: bool = False) -> SyncResult:
        """
        Delete a remote directory and everything below it.

        Children are removed before their parent. A failing child does
        not stop its siblings unless ``strict`` is set.

        Raises:
            FTPListingError: If ``remote_dir`` itself cannot be listed
            FTPTransferError: On the first failure when ``strict``
        """
        self._require("Delete directory")
        return TreeSynchronizer(self, strict=strict).delete_tree(remote_dir)

    def download_tree(self, remote_dir: str, local_dir: str = ".", strict: bool = False) -> SyncResult:
        """
        Mirror a remote directory tree onto the local filesystem.

        Raises:
            FTPListingError: If ``remote_dir`` itself cannot be listed
            FTPTransferError: On the first failure when ``strict``
        """
        self._require("Download directory")
        return TreeSynchronizer(self, strict=strict).download_tree(remote_dir, local_dir)

    def upload_tree(self, local_dir: str, strict: bool = False) -> SyncResult:
        """
        Mirror a local directory tree into the working directory.

        The working directory is restored when the walk ends.

        Raises:
            FTPTransferError: On the first failure when ``strict``
        """
        self._require("Upload directory")
        return TreeSynchronizer(self, strict=strict).upload_tree(local_dir)

"""Pytest configuration and shared fixtures for the FTP session tests."""

import pytest
from pathlib import Path
from unittest.mock import MagicMock

from src.ftp.session import FTPSession
from src.ftp.transport import FTPTransport


# Test constants
TEST_FTP_HOST = "127.0.0.1"
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"

FEAT_REPLY = ["211-Features supported:", " EPRT", " MDTM", " SIZE", " REST STREAM", "211 End FEAT."]


@pytest.fixture
def mock_transport() -> MagicMock:
    """Transport double that accepts every verb."""
    transport = MagicMock(spec=FTPTransport)
    transport.execute.return_value = list(FEAT_REPLY)
    transport.list_raw.return_value = []
    transport.retrieve.return_value = True
    transport.store.return_value = True
    transport.retrieve_to_file.return_value = True
    transport.store_from_file.return_value = True
    transport.delete.return_value = True
    transport.make_directory.return_value = True
    transport.remove_directory.return_value = True
    transport.rename.return_value = True
    transport.set_passive.return_value = True
    return transport


@pytest.fixture
def session(mock_transport) -> FTPSession:
    """Disconnected session that will open ``mock_transport``."""
    return FTPSession(transport_factory=lambda: mock_transport)


@pytest.fixture
def logged_in_session(session) -> FTPSession:
    """Session connected and authenticated against ``mock_transport``."""
    session.connect(TEST_FTP_HOST)
    session.login(TEST_FTP_USER, TEST_FTP_PASS)
    return session


@pytest.fixture
def local_tree(tmp_path: Path) -> Path:
    """
    Create a small local tree::

        project/
            README.md
            src/
                main.py
                lib/
                    util.py
            empty/
    """
    root = tmp_path / "project"
    (root / "src" / "lib").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "README.md").write_text("# project\n")
    (root / "src" / "main.py").write_text("print('hi')\n")
    (root / "src" / "lib" / "util.py").write_bytes(b"\x00\x01binary\xff")
    return root

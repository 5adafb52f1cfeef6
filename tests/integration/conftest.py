"""Fixtures for integration tests against a local FTP server."""

import pytest

from mock_ftp_server import MockFTPServer
from src.ftp.session import FTPSession


@pytest.fixture
def ftp_server():
    """Provide a running mock FTP server."""
    server = MockFTPServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def ftp_session(ftp_server):
    """Provide a session logged in to ``ftp_server``."""
    session = FTPSession()
    session.connect(ftp_server.host, ftp_server.port, timeout=5)
    session.login(ftp_server.username, ftp_server.password)
    yield session
    session.disconnect()

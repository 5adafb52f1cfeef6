"""Unit tests for FTPSession.

Tests the connect/login state machine, preconditions and single-object
file operations against a mocked transport.
"""

import pytest
from unittest.mock import MagicMock, call

from src.ftp.exceptions import (
    FTPAuthenticationError,
    FTPConnectionError,
    FTPListingError,
    FTPNotConnectedError,
    FTPNotLoggedInError,
    FTPTimeoutError,
)
from src.ftp.listing import EntryKind
from src.ftp.session import FTPConnectionConfig, FTPSession, SessionState

TEST_FTP_HOST = "127.0.0.1"
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"


# (method name, positional args) for every operation that needs a login
AUTHENTICATED_OPERATIONS = [
    ("list", ()),
    ("download_to_memory", ("f.txt",)),
    ("download_to_file", ("f.txt", "local.txt")),
    ("upload_from_memory", (b"data", "f.txt")),
    ("upload_from_file", ("local.txt",)),
    ("change_file", ("f.txt", lambda data: data)),
    ("delete_file", ("f.txt",)),
    ("create_directory", ("d",)),
    ("remove_directory", ("d",)),
    ("rename", ("a", "b")),
    ("delete_directory_recursive", ("d",)),
    ("download_tree", ("d",)),
    ("upload_tree", ("d",)),
    ("set_passive_mode", (True,)),
]


class TestFTPConnectionConfig:
    """Tests for FTPConnectionConfig dataclass."""

    def test_default_values(self):
        config = FTPConnectionConfig(host="ftp.example.com")
        assert config.port == 21
        assert config.username == "anonymous"
        assert config.passive_mode is True
        assert config.timeout == 10

    def test_empty_host_raises_error(self):
        with pytest.raises(ValueError, match="Host is required"):
            FTPConnectionConfig(host="")

    def test_invalid_port_raises_error(self):
        with pytest.raises(ValueError, match="Port must be between"):
            FTPConnectionConfig(host="h", port=0)
        with pytest.raises(ValueError, match="Port must be between"):
            FTPConnectionConfig(host="h", port=70000)

    def test_invalid_timeout_raises_error(self):
        with pytest.raises(ValueError, match="Timeout must be between"):
            FTPConnectionConfig(host="h", timeout=0)


class TestSessionLifecycle:
    """Tests for connect, login and disconnect."""

    def test_initial_state_is_disconnected(self, session):
        assert session.state == SessionState.DISCONNECTED
        assert session.is_connected is False
        assert session.is_authenticated is False
        assert session.current_directory == "/"
        assert session.features == set()

    def test_connect_success(self, session, mock_transport):
        session.connect(TEST_FTP_HOST, 2121, passive=False, timeout=5)

        mock_transport.open.assert_called_once_with(TEST_FTP_HOST, 2121, 5)
        assert session.state == SessionState.CONNECTED
        assert session.is_connected is True
        assert session.is_authenticated is False
        assert session.passive_mode is False
        # Mode is only applied after login
        mock_transport.set_passive.assert_not_called()

    def test_connect_collects_features(self, session, mock_transport):
        session.connect(TEST_FTP_HOST)

        mock_transport.execute.assert_called_once_with("FEAT")
        assert session.features == {"EPRT", "MDTM", "SIZE", "REST STREAM"}
        assert session.has_feature("size") is True
        assert session.has_feature("REST") is True
        assert session.has_feature("MLST") is False

    def test_connect_ignores_unexpected_feat_reply(self, session, mock_transport):
        mock_transport.execute.return_value = ["502 Command not implemented."]

        session.connect(TEST_FTP_HOST)

        assert session.is_connected is True
        assert session.features == set()

    def test_connect_survives_feat_failure(self, session, mock_transport):
        mock_transport.execute.return_value = None

        session.connect(TEST_FTP_HOST)

        assert session.is_connected is True
        assert session.features == set()

    def test_connect_failure(self, session, mock_transport):
        mock_transport.open.side_effect = FTPConnectionError(TEST_FTP_HOST, 21)

        with pytest.raises(FTPConnectionError):
            session.connect(TEST_FTP_HOST)

        assert session.state == SessionState.DISCONNECTED
        assert session.is_connected is False

    def test_connect_timeout_is_connection_failure(self, session, mock_transport):
        mock_transport.open.side_effect = FTPTimeoutError(TEST_FTP_HOST, 21, 5)

        with pytest.raises(FTPConnectionError):
            session.connect(TEST_FTP_HOST, timeout=5)

        assert session.state == SessionState.DISCONNECTED

    def test_reconnect_discards_previous_connection(self, mock_transport):
        first = MagicMock()
        first.execute.return_value = None
        transports = [first, mock_transport]
        session = FTPSession(transport_factory=lambda: transports.pop(0))

        session.connect("one.example.com")
        session.login(TEST_FTP_USER, TEST_FTP_PASS)
        session.change_directory("/deep/dir")
        session.connect("two.example.com")

        first.close.assert_called_once()
        mock_transport.open.assert_called_once_with("two.example.com", 21, 10)
        assert session.state == SessionState.CONNECTED
        assert session.current_directory == "/"

    def test_login_requires_connection(self, session):
        with pytest.raises(FTPNotConnectedError):
            session.login(TEST_FTP_USER, TEST_FTP_PASS)

    def test_login_success_reapplies_passive_mode_once(self, session, mock_transport):
        session.connect(TEST_FTP_HOST, passive=False)
        session.login(TEST_FTP_USER, TEST_FTP_PASS)

        mock_transport.login.assert_called_once_with(TEST_FTP_USER, TEST_FTP_PASS)
        assert session.state == SessionState.AUTHENTICATED
        assert session.is_authenticated is True
        assert mock_transport.set_passive.call_args_list == [call(False)]

    def test_login_failure_stays_connected(self, session, mock_transport):
        mock_transport.login.side_effect = FTPAuthenticationError(TEST_FTP_USER)
        session.connect(TEST_FTP_HOST)

        with pytest.raises(FTPAuthenticationError):
            session.login(TEST_FTP_USER, "wrong")

        assert session.state == SessionState.CONNECTED
        mock_transport.set_passive.assert_not_called()

    def test_set_passive_mode(self, logged_in_session, mock_transport):
        logged_in_session.set_passive_mode(False)

        assert logged_in_session.passive_mode is False
        mock_transport.set_passive.assert_called_with(False)

    def test_set_passive_mode_ignores_failure(self, logged_in_session, mock_transport):
        mock_transport.set_passive.return_value = False

        logged_in_session.set_passive_mode(False)  # Should not raise

        assert logged_in_session.passive_mode is False

    def test_disconnect(self, logged_in_session, mock_transport):
        logged_in_session.change_directory("/somewhere")
        logged_in_session.disconnect()

        mock_transport.close.assert_called_once()
        assert logged_in_session.state == SessionState.DISCONNECTED
        assert logged_in_session.features == set()
        assert logged_in_session.current_directory == "/"

    def test_disconnect_twice(self, logged_in_session, mock_transport):
        logged_in_session.disconnect()
        logged_in_session.disconnect()

        assert logged_in_session.state == SessionState.DISCONNECTED
        mock_transport.close.assert_called_once()

    def test_disconnect_when_never_connected(self, session):
        session.disconnect()
        assert session.state == SessionState.DISCONNECTED

    def test_context_manager_disconnects(self, session, mock_transport):
        with session as s:
            s.connect(TEST_FTP_HOST)
            s.login(TEST_FTP_USER, TEST_FTP_PASS)

        mock_transport.close.assert_called_once()
        assert session.state == SessionState.DISCONNECTED

    def test_open_from_config(self, session, mock_transport):
        config = FTPConnectionConfig(host="h", port=2121, username="u", passive_mode=False, timeout=7)

        session.open(config, password="p")

        mock_transport.open.assert_called_once_with("h", 2121, 7)
        mock_transport.login.assert_called_once_with("u", "p")
        assert session.is_authenticated is True

    def test_open_disconnects_on_login_failure(self, session, mock_transport):
        mock_transport.login.side_effect = FTPAuthenticationError("u")

        with pytest.raises(FTPAuthenticationError):
            session.open(FTPConnectionConfig(host="h", username="u"), password="bad")

        assert session.state == SessionState.DISCONNECTED
        mock_transport.close.assert_called_once()


class TestPreconditions:
    """Tests for connection and login requirements."""

    @pytest.mark.parametrize("name,args", AUTHENTICATED_OPERATIONS)
    def test_requires_connection(self, session, name, args):
        with pytest.raises(FTPNotConnectedError):
            getattr(session, name)(*args)

    @pytest.mark.parametrize("name,args", AUTHENTICATED_OPERATIONS)
    def test_requires_login(self, session, mock_transport, name, args):
        session.connect(TEST_FTP_HOST)

        with pytest.raises(FTPNotLoggedInError):
            getattr(session, name)(*args)

        mock_transport.list_raw.assert_not_called()
        mock_transport.store.assert_not_called()


class TestFileOperations:
    """Tests for single-object operations."""

    @pytest.fixture(autouse=True)
    def cwd(self, logged_in_session):
        logged_in_session.change_directory("/home/user")

    def test_list_parses_entries(self, logged_in_session, mock_transport):
        mock_transport.list_raw.return_value = [
            "total 2",
            "drwxr-xr-x   2 owner  group   4096 Jan  1 00:00 docs",
            "-rw-r--r--   1 owner  group    123 Jan  1 00:00 a.txt",
        ]

        entries = logged_in_session.list()

        mock_transport.list_raw.assert_called_once_with("/home/user")
        assert [(e.kind, e.name) for e in entries] == [
            (EntryKind.DIRECTORY, "docs"),
            (EntryKind.FILE, "a.txt"),
        ]

    def test_list_relative_directory(self, logged_in_session, mock_transport):
        logged_in_session.list("docs")
        mock_transport.list_raw.assert_called_once_with("/home/user/docs")

    def test_list_empty(self, logged_in_session, mock_transport):
        assert logged_in_session.list() == []

    def test_list_unavailable(self, logged_in_session, mock_transport):
        mock_transport.list_raw.return_value = None

        with pytest.raises(FTPListingError) as exc_info:
            logged_in_session.list("missing")

        assert exc_info.value.path == "/home/user/missing"

    def test_download_to_memory(self, logged_in_session, mock_transport):
        def retrieve(path, write):
            write(b"hello ")
            write(b"world")
            return True

        mock_transport.retrieve.side_effect = retrieve

        assert logged_in_session.download_to_memory("a.txt") == b"hello world"
        assert mock_transport.retrieve.call_args[0][0] == "/home/user/a.txt"

    def test_download_to_memory_failure_is_empty(self, logged_in_session, mock_transport):
        def retrieve(path, write):
            write(b"partial")
            return False

        mock_transport.retrieve.side_effect = retrieve

        assert logged_in_session.download_to_memory("a.txt") == b""

    def test_download_to_file(self, logged_in_session, mock_transport):
        assert logged_in_session.download_to_file("a.txt", "/tmp/a.txt") is True
        mock_transport.retrieve_to_file.assert_called_once_with("/home/user/a.txt", "/tmp/a.txt")

    def test_upload_from_memory(self, logged_in_session, mock_transport):
        stored = {}

        def store(path, source):
            stored[path] = source.read()
            return True

        mock_transport.store.side_effect = store

        assert logged_in_session.upload_from_memory(b"\x00bytes", "b.bin") is True
        assert stored == {"/home/user/b.bin": b"\x00bytes"}

    def test_upload_from_memory_encodes_text(self, logged_in_session, mock_transport):
        stored = {}
        mock_transport.store.side_effect = lambda path, source: stored.setdefault(path, source.read()) is not None

        logged_in_session.upload_from_memory("héllo", "/abs/t.txt")

        assert stored == {"/abs/t.txt": "héllo".encode("utf-8")}

    def test_upload_from_file_defaults_to_basename(self, logged_in_session, mock_transport):
        assert logged_in_session.upload_from_file("/local/dir/report.pdf") is True
        mock_transport.store_from_file.assert_called_once_with(
            "/local/dir/report.pdf", "/home/user/report.pdf"
        )

    def test_upload_from_file_explicit_remote(self, logged_in_session, mock_transport):
        logged_in_session.upload_from_file("/local/report.pdf", "archive/r.pdf")
        mock_transport.store_from_file.assert_called_once_with(
            "/local/report.pdf", "/home/user/archive/r.pdf"
        )

    def test_upload_failure_is_reported(self, logged_in_session, mock_transport):
        mock_transport.store_from_file.return_value = False
        assert logged_in_session.upload_from_file("/local/x") is False

    def test_delete_file(self, logged_in_session, mock_transport):
        assert logged_in_session.delete_file("a.txt") is True
        mock_transport.delete.assert_called_once_with("/home/user/a.txt")

    def test_delete_file_failure(self, logged_in_session, mock_transport):
        mock_transport.delete.return_value = False
        assert logged_in_session.delete_file("a.txt") is False

    def test_create_directory(self, logged_in_session, mock_transport):
        assert logged_in_session.create_directory("new") is True
        mock_transport.make_directory.assert_called_once_with("/home/user/new")

    def test_rename(self, logged_in_session, mock_transport):
        assert logged_in_session.rename("a.txt", "/archive/a.txt") is True
        mock_transport.rename.assert_called_once_with("/home/user/a.txt", "/archive/a.txt")

    def test_change_file_uploads_callback_result(self, logged_in_session, mock_transport):
        stored = {}

        def retrieve(path, write):
            write(b"version=1")
            return True

        def store(path, source):
            stored[path] = source.read()
            return True

        mock_transport.retrieve.side_effect = retrieve
        mock_transport.store.side_effect = store

        result = logged_in_session.change_file("conf.ini", lambda data: data.replace(b"1", b"2"))

        assert result is True
        assert stored == {"/home/user/conf.ini": b"version=2"}

    def test_change_file_none_leaves_file(self, logged_in_session, mock_transport):
        seen = []

        result = logged_in_session.change_file("conf.ini", lambda data: seen.append(data))

        assert result is False
        assert seen == [b""]
        mock_transport.store.assert_not_called()

    def test_change_directory_is_local(self, logged_in_session, mock_transport):
        assert logged_in_session.change_directory("sub") == "/home/user/sub"
        assert logged_in_session.current_directory == "/home/user/sub"
        mock_transport.execute.assert_called_once_with("FEAT")

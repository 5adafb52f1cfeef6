"""Command-line entry point for the FTP session client.

Wires settings, credentials and logging around one FTPSession and runs
a single command against the server.

Usage:
    python -m src.main --host ftp.example.com --user alice ls /pub
    python -m src.main mirror-down /pub/docs ./downloads
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config.credentials import CredentialManager
from .config.paths import get_log_file_path
from .config.settings import AppSettings, SettingsManager
from .ftp.exceptions import FTPAuthenticationError, FTPConnectionError, FTPError
from .ftp.session import FTPConnectionConfig, FTPSession
from .ftp.sync import SyncResult
from .utils.logging import get_logger, setup_logging

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONNECTION = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog="ftp-session", description="FTP session client")
    parser.add_argument("--host", help="server host (default: last used)")
    parser.add_argument("--port", type=int, help="server port")
    parser.add_argument("--user", help="login name")
    parser.add_argument("--password", help="password (default: system keyring)")
    parser.add_argument("--active", action="store_true", help="use active mode transfers")
    parser.add_argument("--timeout", type=int, help="connect timeout in seconds")
    parser.add_argument("--save-password", action="store_true", help="store the password in the keyring")
    parser.add_argument("--strict", action="store_true", help="stop tree operations at the first failure")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--log-file", action="store_true", help="also log to the application log file")

    commands = parser.add_subparsers(dest="command", required=True)

    ls = commands.add_parser("ls", help="list a directory")
    ls.add_argument("path", nargs="?", default=".")

    cat = commands.add_parser("cat", help="print a remote file")
    cat.add_argument("remote")

    get = commands.add_parser("get", help="download a file")
    get.add_argument("remote")
    get.add_argument("local", nargs="?")

    put = commands.add_parser("put", help="upload a file")
    put.add_argument("local")
    put.add_argument("remote", nargs="?", default="")

    rm = commands.add_parser("rm", help="delete a file")
    rm.add_argument("remote")

    mkdir = commands.add_parser("mkdir", help="create a directory")
    mkdir.add_argument("remote")

    mv = commands.add_parser("mv", help="rename or move")
    mv.add_argument("source")
    mv.add_argument("target")

    rmtree = commands.add_parser("rmtree", help="delete a directory recursively")
    rmtree.add_argument("remote")

    down = commands.add_parser("mirror-down", help="download a directory tree")
    down.add_argument("remote")
    down.add_argument("local", nargs="?", default="")

    up = commands.add_parser("mirror-up", help="upload a directory tree")
    up.add_argument("local")
    up.add_argument("--to", default=".", help="remote directory to upload into")

    return parser


class Application:
    """Runs one command-line invocation."""

    def __init__(
        self,
        args: argparse.Namespace,
        settings_manager: Optional[SettingsManager] = None,
        credential_manager: Optional[CredentialManager] = None,
        session: Optional[FTPSession] = None,
    ):
        self._args = args
        self._settings_manager = settings_manager or SettingsManager()
        self._settings = self._settings_manager.load()
        self._credential_manager = credential_manager or CredentialManager()
        self._session = session or FTPSession()
        self._logger = get_logger("cli")

    def _effective_settings(self) -> AppSettings:
        args = self._args
        return self._settings.with_overrides(
            host=args.host,
            port=args.port,
            username=args.user,
            active=args.active,
            timeout=args.timeout,
        )

    def _password(self, settings: AppSettings) -> str:
        if self._args.password is not None:
            return self._args.password
        saved = self._credential_manager.get_password(settings.last_host, settings.last_username)
        return saved or ""

    def run(self) -> int:
        """Connect, run the command and disconnect."""
        settings = self._effective_settings()
        try:
            config = settings.connection_config()
        except ValueError as e:
            print(f"error: {e}", file=sys.stderr)
            return EXIT_CONNECTION

        password = self._password(settings)

        with self._session as session:
            try:
                session.open(config, password)
            except (FTPConnectionError, FTPAuthenticationError) as e:
                self._logger.error(str(e))
                print(f"error: {e}", file=sys.stderr)
                return EXIT_CONNECTION

            self._save_connection_settings(config, password)

            try:
                return self._dispatch(session, settings)
            except FTPError as e:
                self._logger.error(str(e))
                print(f"error: {e}", file=sys.stderr)
                return EXIT_FAILED

    def _save_connection_settings(self, config: FTPConnectionConfig, password: str) -> None:
        """Save successful connection settings."""
        self._settings_manager.remember(config)
        if self._args.save_password and password:
            if not self._credential_manager.save_password(config.host, config.username, password):
                self._logger.warning("Could not store password in the keyring")

    def _dispatch(self, session: FTPSession, settings: AppSettings) -> int:
        args = self._args
        command = args.command

        if command == "ls":
            for entry in session.list(args.path):
                marker = "d" if entry.is_directory else "-"
                perms = entry.permissions
                print(
                    f"{marker}{perms.owner}{perms.group}{perms.other} "
                    f"{entry.owner:<8} {entry.group:<8} {entry.size:>10} {entry.date} {entry.name}"
                )
            return EXIT_OK

        if command == "cat":
            sys.stdout.buffer.write(session.download_to_memory(args.remote))
            sys.stdout.flush()
            return EXIT_OK

        if command == "get":
            local = args.local or os.path.basename(args.remote)
            return self._status(session.download_to_file(args.remote, local))

        if command == "put":
            return self._status(session.upload_from_file(args.local, args.remote))

        if command == "rm":
            return self._status(session.delete_file(args.remote))

        if command == "mkdir":
            return self._status(session.create_directory(args.remote))

        if command == "mv":
            return self._status(session.rename(args.source, args.target))

        if command == "rmtree":
            return self._report(session.delete_directory_recursive(args.remote, strict=args.strict))

        if command == "mirror-down":
            local = args.local or settings.local_directory or "."
            return self._report(session.download_tree(args.remote, local, strict=args.strict))

        if command == "mirror-up":
            session.change_directory(args.to)
            return self._report(session.upload_tree(args.local, strict=args.strict))

        raise ValueError(f"Unknown command: {command}")

    @staticmethod
    def _status(ok: bool) -> int:
        return EXIT_OK if ok else EXIT_FAILED

    def _report(self, result: SyncResult) -> int:
        summary = result.summary()
        print(
            f"{summary['operation']} {summary['root']}: "
            f"{summary['successful']} ok, {summary['failed']} failed"
        )
        for path in summary["failures"]:
            print(f"  failed: {path}", file=sys.stderr)
        return EXIT_OK if result.success else EXIT_FAILED


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        log_file=get_log_file_path() if args.log_file else None,
    )

    return Application(args).run()


if __name__ == "__main__":
    sys.exit(main())

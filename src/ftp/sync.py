"""Recursive directory tree operations.

Composes the single-object operations of an FTPSession into tree
download, tree upload and recursive delete. A failing child is recorded
and its siblings are still processed; strict mode turns the first
failure into FTPTransferError instead.
"""

import logging
import os
import posixpath
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

from src.ftp.exceptions import FTPListingError, FTPTransferError

if TYPE_CHECKING:
    from src.ftp.session import FTPSession

logger = logging.getLogger("ftp_session.sync")


@dataclass
class SyncResult:
    """Outcome of a recursive tree operation."""
    operation: str
    root: str
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no child operation failed."""
        return not self.failed

    def record(self, path: str, ok: bool) -> bool:
        """Record the outcome for one path and pass ``ok`` through."""
        (self.succeeded if ok else self.failed).append(path)
        return ok

    def summary(self) -> dict:
        """
        Get summary statistics for the operation.

        Returns:
            Dictionary with summary statistics
        """
        return {
            "operation": self.operation,
            "root": self.root,
            "total": len(self.succeeded) + len(self.failed),
            "successful": len(self.succeeded),
            "failed": len(self.failed),
            "failures": list(self.failed),
        }


class TreeSynchronizer:
    """Mirrors directory trees between the server and the local disk."""

    def __init__(self, session: "FTPSession", strict: bool = False):
        """
        Initialize the synchronizer.

        Args:
            session: Authenticated session to operate on
            strict: Raise on the first failed child instead of continuing
        """
        self._session = session
        self._fs = session.filesystem
        self._strict = strict

    def _check(self, result: SyncResult, path: str, ok: bool, operation: str) -> bool:
        result.record(path, ok)
        if not ok:
            logger.warning(f"Could not {operation} {path}")
            if self._strict:
                raise FTPTransferError(path, operation)
        return ok

    def delete_tree(self, remote_dir: str) -> SyncResult:
        """
        Delete a remote directory depth-first.

        Args:
            remote_dir: Directory to remove

        Returns:
            SyncResult listing deleted and undeletable paths

        Raises:
            FTPListingError: If ``remote_dir`` cannot be listed
        """
        remote_dir = self._session.resolve(remote_dir)
        result = SyncResult("delete", remote_dir)

        self._delete_tree(remote_dir, result, self._session.list(remote_dir))

        logger.info(
            f"Deleted {remote_dir}: {len(result.succeeded)} removed, "
            f"{len(result.failed)} failed"
        )
        return result

    def _delete_tree(self, remote_dir: str, result: SyncResult, entries) -> None:
        for entry in entries:
            path = f"{remote_dir.rstrip('/')}/{entry.name}"

            if entry.is_file:
                self._check(result, path, self._session.delete_file(path), "delete")
            elif entry.is_directory:
                try:
                    children = self._session.list(path)
                except FTPListingError:
                    self._check(result, path, False, "list")
                    continue
                self._delete_tree(path, result, children)

        self._check(result, remote_dir, self._session.remove_directory(remote_dir), "remove directory")

    def download_tree(self, remote_dir: str, local_dir: str = ".") -> SyncResult:
        """
        Download a remote directory tree.

        Unless ``remote_dir`` ends with "/", a local directory named
        after it is created under ``local_dir`` and receives its
        contents.

        Args:
            remote_dir: Remote directory to mirror
            local_dir: Local destination, default the process directory

        Returns:
            SyncResult listing local files written and failed downloads

        Raises:
            FTPListingError: If ``remote_dir`` cannot be listed
        """
        remote_dir = self._session.resolve(remote_dir)
        if not local_dir or local_dir == ".":
            local_dir = os.getcwd()

        result = SyncResult("download", remote_dir)
        self._download_tree(remote_dir, str(local_dir), result, self._session.list(remote_dir))

        logger.info(
            f"Downloaded {remote_dir} to {local_dir}: {len(result.succeeded)} ok, "
            f"{len(result.failed)} failed"
        )
        return result

    def _download_tree(self, remote_dir: str, local_dir: str, result: SyncResult, entries) -> None:
        destination = local_dir
        if not remote_dir.endswith("/"):
            destination = os.path.join(local_dir, posixpath.basename(remote_dir))
            if not self._fs.exists(destination):
                self._check(result, destination, self._fs.make_directory(destination), "create directory")

        for entry in entries:
            remote_path = f"{remote_dir.rstrip('/')}/{entry.name}"

            if entry.is_file:
                local_path = os.path.join(destination, entry.name)
                ok = self._session.download_to_file(remote_path, local_path)
                self._check(result, remote_path, ok, "download")
            elif entry.is_directory:
                try:
                    children = self._session.list(remote_path)
                except FTPListingError:
                    self._check(result, remote_path, False, "list")
                    continue
                self._download_tree(remote_path, destination, result, children)

    def upload_tree(self, local_dir: str) -> SyncResult:
        """
        Upload a local directory tree into the working directory.

        Unless ``local_dir`` ends with a separator, a remote directory
        named after it is created first and receives its contents.
        Directories are created before the files they contain. The
        working directory is restored afterwards.

        Args:
            local_dir: Local directory to mirror

        Returns:
            SyncResult listing uploaded and failed remote paths

        Raises:
            FTPTransferError: If ``local_dir`` is not a directory; nothing
                is created on the server in that case
        """
        local_dir = str(local_dir)
        if not self._fs.is_directory(local_dir):
            raise FTPTransferError(local_dir, "upload", NotADirectoryError(local_dir))

        start_dir = self._session.current_directory
        base_remote = self._session.resolve(".")
        result = SyncResult("upload", local_dir)

        try:
            if not local_dir.endswith(("/", os.sep)):
                name = os.path.basename(os.path.abspath(local_dir))
                base_remote = self._session.resolve(name)
                self._check(result, base_remote, self._session.create_directory(name), "create directory")

            for path, is_dir in self._fs.walk(local_dir):
                if is_dir:
                    remote_dir = self._remote_path(base_remote, os.path.relpath(path, local_dir))
                    ok = self._session.create_directory(remote_dir)
                    self._check(result, remote_dir, ok, "create directory")
                else:
                    parent = os.path.relpath(os.path.dirname(path), local_dir)
                    self._session.change_directory(self._remote_path(base_remote, parent))
                    ok = self._session.upload_from_file(path)
                    remote_file = self._session.resolve(os.path.basename(path))
                    self._check(result, remote_file, ok, "upload")
        finally:
            self._session.change_directory(start_dir)

        logger.info(
            f"Uploaded {local_dir} to {base_remote}: {len(result.succeeded)} ok, "
            f"{len(result.failed)} failed"
        )
        return result

    @staticmethod
    def _remote_path(base: str, relative: str) -> str:
        relative = relative.replace(os.sep, "/")
        if relative in ("", "."):
            return base
        return f"{base.rstrip('/')}/{relative}"

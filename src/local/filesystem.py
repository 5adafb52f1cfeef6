"""Local filesystem access for tree synchronisation.

Small pathlib wrapper used by the tree synchronizer, so tests and
callers can substitute another implementation.
"""

import logging
from pathlib import Path
from typing import Iterator, Tuple, Union

logger = logging.getLogger("ftp_session.local")

PathLike = Union[str, Path]


class LocalFilesystem:
    """Reads, writes and walks local files."""

    def exists(self, path: PathLike) -> bool:
        """True if the path exists."""
        return Path(path).exists()

    def is_directory(self, path: PathLike) -> bool:
        """True if the path is an existing directory."""
        return Path(path).is_dir()

    def make_directory(self, path: PathLike) -> bool:
        """
        Create a directory (parents included).

        Returns:
            True if the directory exists afterwards
        """
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
            return True
        except OSError as e:
            logger.warning(f"Cannot create local directory {path}: {e}")
            return False

    def read_bytes(self, path: PathLike) -> bytes:
        """Read a whole local file."""
        return Path(path).read_bytes()

    def write_bytes(self, path: PathLike, contents: bytes) -> None:
        """Write a whole local file, replacing it if present."""
        Path(path).write_bytes(contents)

    def walk(self, root: PathLike) -> Iterator[Tuple[str, bool]]:
        """
        Walk a directory tree, parents before children.

        Entries of one directory are visited in name order. The root
        itself is not yielded.

        Args:
            root: Directory to walk

        Yields:
            (path, is_directory) pairs; paths start with ``root``
        """
        root_path = Path(root)
        for child in sorted(root_path.iterdir(), key=lambda p: p.name):
            is_dir = child.is_dir()
            yield str(child), is_dir
            if is_dir:
                yield from self.walk(child)

"""Remote path resolution against a client-side working directory.

The working directory is purely local state: changing it never talks to
the server and never checks that the directory exists. Paths are not
normalised, so ``..`` and ``//`` reach the server untouched.
"""

ROOT = "/"


def is_absolute(path: str) -> bool:
    """True if the trimmed path starts at the root."""
    return path.strip().startswith("/")


class PathResolver:
    """Builds absolute remote paths from a working directory."""

    def __init__(self, directory: str = ROOT):
        self._directory = directory

    @property
    def current_directory(self) -> str:
        """Current remote working directory."""
        return self._directory

    def resolve(self, path: str) -> str:
        """
        Resolve a path expression to an absolute remote path.

        Args:
            path: ".", "", an absolute path or a path relative to the
                working directory

        Returns:
            Absolute remote path
        """
        if path is None or path.strip() in ("", "."):
            return self._directory.rstrip("/") or ROOT

        if is_absolute(path):
            return path.strip()

        return f"{self._directory.rstrip('/')}/{path}"

    def change_directory(self, path: str) -> str:
        """Make ``path`` the working directory and return its resolved form."""
        self._directory = self.resolve(path)
        return self._directory

    def reset(self) -> None:
        """Return to the root directory."""
        self._directory = ROOT

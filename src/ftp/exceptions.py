"""FTP session exceptions.

Custom exception hierarchy for the session core. Only these conditions
abort an operation; per-verb transport failures are reported as return
values instead.
"""


class FTPError(Exception):
    """Base exception for all FTP-related errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class FTPConnectionError(FTPError):
    """Failed to establish FTP connection."""

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Failed to connect to {host}:{port}"
        super().__init__(message, original_error)


class FTPTimeoutError(FTPConnectionError):
    """Connecting to the FTP server timed out."""

    def __init__(self, host: str, port: int, timeout: float = 10):
        self.timeout = timeout
        super().__init__(host, port)
        self.message = f"Connection to {host}:{port} timed out after {timeout} seconds"


class FTPAuthenticationError(FTPError):
    """FTP authentication (login) failed."""

    def __init__(self, username: str, original_error: Exception = None):
        self.username = username
        message = f"Authentication failed for user '{username}'"
        super().__init__(message, original_error)


class FTPNotConnectedError(FTPError):
    """Operation attempted without active FTP connection."""

    def __init__(self, operation: str = "Operation"):
        self.operation = operation
        message = f"{operation} requires an active FTP connection"
        super().__init__(message)


class FTPNotLoggedInError(FTPError):
    """Operation attempted before a successful login."""

    def __init__(self, operation: str = "Operation"):
        self.operation = operation
        message = f"{operation} requires a successful login"
        super().__init__(message)


class FTPListingError(FTPError):
    """Server refused to produce a directory listing."""

    def __init__(self, path: str, original_error: Exception = None):
        self.path = path
        message = f"Failed to list path '{path}'"
        super().__init__(message, original_error)


class FTPTransferError(FTPError):
    """A child operation of a strict tree operation failed."""

    def __init__(self, path: str, operation: str, original_error: Exception = None):
        self.path = path
        self.operation = operation
        message = f"Failed to {operation} '{path}'"
        super().__init__(message, original_error)

"""FTP session core.

This module handles all FTP-related functionality:
- FTPSession: Connection/login state machine and file operations
- PathResolver: Client-side working directory and path resolution
- parse_listing: Unix long-listing parser
- TreeSynchronizer: Recursive upload, download and delete
- FTPTransport: ftplib adapter used by the session
- Exceptions: FTP-specific error types
"""

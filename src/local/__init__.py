"""Local filesystem module.

This module provides:
- LocalFilesystem: read, write and walk local directory trees
"""

from src.local.filesystem import LocalFilesystem

__all__ = ["LocalFilesystem"]

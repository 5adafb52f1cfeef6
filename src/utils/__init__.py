"""Utility module for the FTP session client.

This module provides cross-cutting utilities:
- Logging: Configured logging with PII redaction
"""

"""Xcode Server API client module.

This module provides:
- XcodeServerClient: Async client for listing, creating and deleting bots
- XcodeBot: A bot bound to its server (delete, integrate, latest integration)
- Client exceptions
"""

from .client import XcodeBot, XcodeServerClient
from .exceptions import XcodeAuthenticationError, XcodeNotFoundError, XcodeServerError

__all__ = [
    "XcodeBot",
    "XcodeServerClient",
    "XcodeAuthenticationError",
    "XcodeNotFoundError",
    "XcodeServerError",
]

"""
I/O layer for CalDAV protocol.

This module provides sync and async implementations for executing
DAVRequest objects and returning DAVResponse objects.

The I/O layer is intentionally thin - it only handles HTTP transport.
All protocol logic (XML building/parsing) is in minicaldav.protocol.
"""

from .base import AsyncIOProtocol, SyncIOProtocol, normalize_proxy
from .sync import SyncIO
from .async_ import AsyncIO

__all__ = [
    # Protocols
    "SyncIOProtocol",
    "AsyncIOProtocol",
    "normalize_proxy",
    # Implementations
    "SyncIO",
    "AsyncIO",
]

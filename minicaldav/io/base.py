"""
Abstract I/O protocol definition.

This module defines the interface that all I/O implementations must follow.
"""

import logging
from typing import Optional, Protocol, runtime_checkable
from urllib.parse import urlparse

from minicaldav.protocol.types import DAVRequest, DAVResponse

log = logging.getLogger("minicaldav")


@runtime_checkable
class SyncIOProtocol(Protocol):
    """
    Protocol defining the synchronous I/O interface.

    Implementations must provide a way to execute DAVRequest objects
    and return DAVResponse objects synchronously.  Failures to get any
    HTTP response at all must be raised as TransportError.
    """

    def execute(self, request: DAVRequest) -> DAVResponse:
        """
        Execute a request and return the response.

        Args:
            request: The DAVRequest to execute

        Returns:
            DAVResponse with status, headers, and body
        """
        ...

    def close(self) -> None:
        """Close any resources (e.g., HTTP session)."""
        ...


@runtime_checkable
class AsyncIOProtocol(Protocol):
    """
    Protocol defining the asynchronous I/O interface.
    """

    async def execute(self, request: DAVRequest) -> DAVResponse:
        """
        Execute a request and return the response.

        Args:
            request: The DAVRequest to execute

        Returns:
            DAVResponse with status, headers, and body
        """
        ...

    async def close(self) -> None:
        """Close any resources (e.g., HTTP session)."""
        ...


def normalize_proxy(proxy: Optional[str], url: str) -> Optional[str]:
    """
    A proxy may be given as ``hostname``, ``hostname:port`` or
    ``scheme://hostname:port``.  Scheme defaults to the one of the
    target url, port defaults to 8080.
    """
    if not proxy:
        return None
    _proxy = proxy
    if "://" not in proxy:
        _proxy = (urlparse(url).scheme or "http") + "://" + proxy

    # TODO: this will break if username:password is embedded in the proxy URL
    p = _proxy.split(":")
    if len(p) == 2:
        _proxy += ":8080"
    log.debug("proxy: %s", _proxy)
    return _proxy

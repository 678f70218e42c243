"""
Asynchronous I/O implementation using aiohttp library.
"""

import asyncio
from typing import Optional

import aiohttp

from minicaldav.lib import error
from minicaldav.protocol.types import DAVRequest, DAVResponse

from .base import normalize_proxy


class AsyncIO:
    """
    Asynchronous I/O shell using aiohttp library.

    This is a thin wrapper that executes DAVRequest objects via HTTP
    and returns DAVResponse objects.

    Example:
        async with AsyncIO() as io:
            request = protocol.current_user_principal_request()
            response = await io.execute(request)
            multistatus = protocol.parse_multistatus(response)
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        proxy: Optional[str] = None,
        timeout: Optional[float] = None,
        verify_ssl: bool = True,
    ):
        """
        Initialize the async I/O handler.

        Args:
            session: Existing aiohttp ClientSession to use (creates new if None)
            proxy: Proxy server, ``http://hostname:port``
            timeout: Request timeout in seconds (None waits forever)
            verify_ssl: Verify SSL certificates
        """
        self._session = session
        self._owns_session = session is None
        self.proxy = proxy
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.verify_ssl = verify_ssl

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None:
            connector = aiohttp.TCPConnector(ssl=None if self.verify_ssl else False)
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                connector=connector,
            )
        return self._session

    async def execute(self, request: DAVRequest) -> DAVResponse:
        """
        Execute a DAVRequest and return DAVResponse.

        Raises:
            TransportError: if no HTTP response was received
        """
        session = await self._get_session()

        try:
            async with session.request(
                method=request.method.value,
                url=request.url,
                headers=request.headers,
                data=request.body,
                proxy=normalize_proxy(self.proxy, request.url),
            ) as response:
                body = await response.read()
                return DAVResponse(
                    status=response.status,
                    headers=dict(response.headers),
                    body=body,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise error.TransportError(url=request.url, reason=str(e) or repr(e)) from e

    async def close(self) -> None:
        """Close the session if we created it."""
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "AsyncIO":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args) -> None:
        """Async context manager exit."""
        await self.close()

"""
Synchronous I/O implementation using the requests library.
"""

from typing import Optional

import requests

from minicaldav.lib import error
from minicaldav.protocol.types import DAVRequest, DAVResponse

from .base import normalize_proxy


class SyncIO:
    """
    Synchronous I/O shell using the requests library.

    This is a thin wrapper that executes DAVRequest objects via HTTP
    and returns DAVResponse objects.

    Example:
        io = SyncIO(proxy="proxy.example.com:3128")
        request = protocol.current_user_principal_request()
        response = io.execute(request)
        multistatus = protocol.parse_multistatus(response)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        proxy: Optional[str] = None,
        timeout: Optional[float] = None,
        verify: bool = True,
    ):
        """
        Initialize the sync I/O handler.

        Args:
            session: Existing requests Session to use (creates new if None)
            proxy: Proxy server, ``scheme://hostname:port``
            timeout: Request timeout in seconds (None waits forever)
            verify: Verify SSL certificates
        """
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.proxy = proxy
        self.timeout = timeout
        self.verify = verify

    def execute(self, request: DAVRequest) -> DAVResponse:
        """
        Execute a DAVRequest and return DAVResponse.

        Raises:
            TransportError: if no HTTP response was received
        """
        proxies = None
        proxy = normalize_proxy(self.proxy, request.url)
        if proxy:
            proxies = {"http": proxy, "https": proxy}

        try:
            response = self.session.request(
                method=request.method.value,
                url=request.url,
                headers=request.headers,
                data=request.body,
                proxies=proxies,
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.exceptions.RequestException as e:
            raise error.TransportError(url=request.url, reason=str(e)) from e

        return DAVResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )

    def close(self) -> None:
        """Close the session if we created it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self) -> "SyncIO":
        """Context manager entry."""
        return self

    def __exit__(self, *args) -> None:
        """Context manager exit."""
        self.close()

#!/usr/bin/env python
"""
Asynchronous CalDAV client.

Mirrors DAVClient; every operation is a coroutine issuing exactly one
request through aiohttp.

Example:
    async with AsyncDAVClient("https://cal.example.com/dav/",
                              username="alice", password="secret") as client:
        principal = await client.get_current_user_principal()
"""
import logging
import sys
from typing import Awaitable
from typing import Callable
from typing import Optional
from typing import TypeVar

from minicaldav.davclient import connection_params
from minicaldav.davclient import describe_request
from minicaldav.davclient import split_credentials
from minicaldav.io import AsyncIO
from minicaldav.io import AsyncIOProtocol
from minicaldav.lib import error
from minicaldav.lib.debug import xmlstring
from minicaldav.protocol import CalDAVProtocol
from minicaldav.protocol import DAVRequest
from minicaldav.protocol import DAVResponse
from minicaldav.protocol import MultiStatus

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

log = logging.getLogger("minicaldav")

T = TypeVar("T")


class AsyncDAVClient:
    """
    Async twin of DAVClient.  See DAVClient for the parameters.
    """

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        proxy: Optional[str] = None,
        timeout: Optional[float] = None,
        ssl_verify_cert: bool = True,
        huge_tree: bool = False,
        io: Optional[AsyncIOProtocol] = None,
    ) -> None:
        url, username, password = split_credentials(str(url), username, password)
        self.url = url
        self.username = username
        self.password = password
        self.proxy = proxy
        self.timeout = timeout
        self.protocol = CalDAVProtocol(
            base_url=url, username=username, password=password, huge_tree=huge_tree
        )
        self.io = io or AsyncIO(proxy=proxy, timeout=timeout, verify_ssl=ssl_verify_cert)

    async def close(self) -> None:
        """Close the HTTP session."""
        await self.io.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def _run(
        self,
        operation: str,
        request: DAVRequest,
        parse: Callable[[DAVResponse, str], T],
    ) -> T:
        log.debug("%s: request = [%s]", operation, describe_request(request))
        try:
            response = await self.io.execute(request)
        except error.TransportError as e:
            log.error("%s: error = [%s]", operation, e)
            raise
        log.debug(
            "%s: response = [%i %s] [%s]",
            operation,
            response.status,
            response.reason,
            xmlstring(response.body),
        )
        return parse(response, request.url)

    async def get_current_user_principal(self) -> MultiStatus:
        """Raises DAVResponseError on a non-2xx status, like the other queries"""
        return await self._run(
            "get_current_user_principal",
            self.protocol.current_user_principal_request(),
            self.protocol.parse_multistatus,
        )

    async def get_calendar_home_set(self) -> MultiStatus:
        return await self._run(
            "get_calendar_home_set",
            self.protocol.calendar_home_set_request(),
            self.protocol.parse_multistatus,
        )

    async def get_calendar_component_set(self) -> MultiStatus:
        return await self._run(
            "get_calendar_component_set",
            self.protocol.calendar_component_set_request(),
            self.protocol.parse_multistatus,
        )

    async def search(self, field: str, id: str) -> MultiStatus:
        return await self._run(
            "search",
            self.protocol.search_request(field, id),
            self.protocol.parse_multistatus,
        )

    async def put(
        self, resource_path: str, event_body: str, etag: Optional[str] = None
    ) -> Optional[str]:
        """Returns the new etag (None if the server sent none), raises PutError on non-2xx"""
        return await self._run(
            "put",
            self.protocol.put_request(resource_path, event_body, etag),
            self.protocol.parse_put,
        )

    async def delete(self, resource_path: str, etag: str) -> MultiStatus:
        """Conditional delete, raises DeleteError on non-2xx"""
        return await self._run(
            "delete",
            self.protocol.delete_request(resource_path, etag),
            self.protocol.parse_delete,
        )


async def _discover(
    method: Callable[[AsyncDAVClient], Awaitable[MultiStatus]],
    url: str,
    username: Optional[str],
    password: Optional[str],
    proxy: Optional[str],
    **kwargs,
) -> MultiStatus:
    async with AsyncDAVClient(
        url, username=username, password=password, proxy=proxy, **kwargs
    ) as client:
        return await method(client)


async def get_current_user_principal(
    url: str,
    username: Optional[str],
    password: Optional[str],
    proxy: Optional[str] = None,
    **kwargs,
) -> MultiStatus:
    return await _discover(
        AsyncDAVClient.get_current_user_principal,
        url,
        username,
        password,
        proxy,
        **kwargs,
    )


async def get_calendar_home_set(
    url: str,
    username: Optional[str],
    password: Optional[str],
    proxy: Optional[str] = None,
    **kwargs,
) -> MultiStatus:
    return await _discover(
        AsyncDAVClient.get_calendar_home_set, url, username, password, proxy, **kwargs
    )


async def get_calendar_component_set(
    url: str,
    username: Optional[str],
    password: Optional[str],
    proxy: Optional[str] = None,
    **kwargs,
) -> MultiStatus:
    return await _discover(
        AsyncDAVClient.get_calendar_component_set,
        url,
        username,
        password,
        proxy,
        **kwargs,
    )


def get_davclient(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section: Optional[str] = None,
    environment: bool = True,
    **config_data,
) -> Optional[AsyncDAVClient]:
    """Same lookup as minicaldav.davclient.get_davclient, yielding an AsyncDAVClient"""
    conn_params = connection_params(
        check_config_file, config_file, config_section, environment, **config_data
    )
    if conn_params is None:
        return None
    return AsyncDAVClient(**conn_params)

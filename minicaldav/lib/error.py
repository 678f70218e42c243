#!/usr/bin/env python
import logging
import os
from typing import Optional
from typing import Union

from minicaldav import __version__

## one of DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("PYTHON_MINICALDAV_DEBUGMODE")
if not debugmode:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("minicaldav")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


class DAVError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason
        super().__init__(self.url, self.reason)

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class TransportError(DAVError):
    """
    The request never produced an HTTP response (connection refused,
    DNS failure, timeout, broken TLS ...).  The library exception is
    available as ``__cause__``.
    """

    pass


class ProtocolDecodeError(DAVError):
    """
    The response body could not be read as a DAV:multistatus document.
    """

    pass


class _StatusError(DAVError):
    """An HTTP response was received, but the status code says it failed"""

    status: Optional[int] = None
    body: Union[bytes, str, None] = None

    def __init__(
        self,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        status: Optional[int] = None,
        body: Union[bytes, str, None] = None,
    ) -> None:
        self.status = status
        self.body = body
        if reason is None and status is not None:
            reason = "HTTP status %i" % status
        super().__init__(url, reason)


class DAVResponseError(_StatusError):
    """PROPFIND or REPORT answered with something else than 2xx"""

    pass


class MutationError(_StatusError):
    """
    PUT or DELETE answered with something else than 2xx.  A 412
    Precondition Failed means the etag given was stale.
    """

    @property
    def precondition_failed(self) -> bool:
        return self.status == 412


class PutError(MutationError):
    pass


class DeleteError(MutationError):
    pass

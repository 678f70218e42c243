#!/usr/bin/env python
import logging

__version__ = "0.3.0"

from .davclient import DAVClient
from .davclient import get_calendar_component_set
from .davclient import get_calendar_home_set
from .davclient import get_current_user_principal
from .davclient import get_davclient
from .async_davclient import AsyncDAVClient
from .protocol import MultiStatus
from .lib.error import DAVError
from .lib.error import DAVResponseError
from .lib.error import DeleteError
from .lib.error import MutationError
from .lib.error import ProtocolDecodeError
from .lib.error import PutError
from .lib.error import TransportError

# Silence notification of no default logging handler
log = logging.getLogger("minicaldav")
log.addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "DAVClient",
    "AsyncDAVClient",
    "MultiStatus",
    "get_calendar_component_set",
    "get_calendar_home_set",
    "get_current_user_principal",
    "get_davclient",
    "DAVError",
    "DAVResponseError",
    "DeleteError",
    "MutationError",
    "ProtocolDecodeError",
    "PutError",
    "TransportError",
]

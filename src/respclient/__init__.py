""" Python client for RESP-style key/value servers. This includes the wire
    codec, the connection and request/reply machinery, and a publish/subscribe
    engine that delivers messages to callbacks from a background thread.
"""

# Utility components.

from . import config
from . import errors

# Submodules used by multiple other components.

from . import protocol
from . import connection
from . import dispatch
from . import subscribe
from . import lists

# Primary public-facing interfaces.

from .client import Client, connect
from .connection import Connection
from .dispatch import Dispatcher
from .subscribe import Subscriber
from .lists import List

from .errors import (
    RespError,
    ConnectionError,
    ProtocolError,
    ResponseError,
    PreconditionError,
    CapabilityError,
)

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

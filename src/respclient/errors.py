""" Exceptions raised by respclient. Every exception derives from
    :class:`RespError`, so a caller that does not care about the details
    can catch that one class.
"""

import builtins


class RespError(Exception):
    """ Base class for all respclient errors. """


class ConnectionError(RespError, builtins.ConnectionError):
    """ The socket could not be established, a read or write failed, or the
        server closed the stream before a reply was complete. A fresh
        connection is required to continue.
    """


class ProtocolError(RespError):
    """ The server sent bytes that do not follow the wire framing. The
        connection that produced them is no longer usable.
    """


class ResponseError(RespError):
    """ The server answered with an error reply, or with a reply that does
        not have the shape the caller asked for. The reply was consumed in
        full, so the connection remains usable.

        :ivar message: The literal text from the server, or a description
            of the unexpected reply.
    """

    def __init__(self, message):
        RespError.__init__(self, message)
        self.message = message


class PreconditionError(RespError, ValueError):
    """ A request was refused before any I/O took place: a required argument
        was missing, a value was too large, or an argument cannot be sent in
        the requested form.
    """


class CapabilityError(PreconditionError):
    """ The connected server reports a version older than the one required
        for the requested command.
    """


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

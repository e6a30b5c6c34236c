""" The :class:`Dispatcher` implements the request/response contract used by
    every operation: send one command, read back one reply, and narrow that
    reply to the shape the caller expects.
"""

import logging
import re
import threading

from . import errors
from .connection import Connection
from .protocol import reply
from .protocol.command import Command

logger = logging.getLogger(__name__)

_leading_digits = re.compile(r'\d+')


def version_tuple(version):
    """ Convert a dotted version string into a tuple of integers suitable
        for comparison: '2.2.0' becomes (2, 2, 0), '2.6.0-rc1' becomes
        (2, 6, 0). Components without leading digits count as zero.
    """

    if isinstance(version, tuple):
        return version

    numbers = list()
    for component in str(version).split('.'):
        match = _leading_digits.match(component)
        if match is None:
            numbers.append(0)
        else:
            numbers.append(int(match.group()))

    return tuple(numbers)


def compare_versions(first, second):
    """ Return -1, 0, or 1 as the *first* version is older than, equal to,
        or newer than the *second*. Missing trailing components count as
        zero, so '2.0' and '2.0.0' are equal.
    """

    first = version_tuple(first)
    second = version_tuple(second)

    length = max(len(first), len(second))
    first = first + (0,) * (length - len(first))
    second = second + (0,) * (length - len(second))

    if first < second:
        return -1
    if first > second:
        return 1
    return 0



class Dispatcher:
    """ Issue commands over a single :class:`Connection` and read their
        replies. The connection is established on first use if it is not
        already open. Calls from multiple threads are serialized; there is
        never more than one request outstanding.

        Every ``expect_*`` method raises
        :class:`respclient.errors.ResponseError` if the server returns an
        error, carrying the server's own message, or if the reply is of a
        different shape than expected. In both cases the reply has been
        read in full and the connection remains usable.
    """

    def __init__(self, connection=None, host=None, port=None):

        if connection is None:
            connection = Connection(host, port)

        self.connection = connection
        self.lock = threading.Lock()


    def close(self):
        self.connection.close()


    @property
    def version(self):
        """ Server version string; connects first if necessary. """

        with self.lock:
            self.connection.connect()

        return self.connection.version


    def execute(self, command, *arguments):
        """ Send *command* and return the :class:`Reply` that answers it.
            *command* is either a :class:`Command` or a verb, in which case
            any *arguments* are used to build one.
        """

        if not isinstance(command, Command):
            command = Command(command, *arguments)
        elif arguments:
            raise TypeError('arguments cannot be combined with a Command instance')

        with self.lock:
            self.connection.connect()
            self.connection.send_command(command)
            response = self.connection.read_reply()

        return response


    def _expect(self, kind, command, arguments):

        response = self.execute(command, *arguments)

        if response.kind == reply.ERROR:
            raise errors.ResponseError(response.value)

        if response.kind != kind:
            raise errors.ResponseError('expected %s reply, got %r' % (kind, response))

        return response.value


    def expect_status(self, command, *arguments, expected='OK'):
        """ Return the status text of the reply. If *expected* is not None
            the status must match it exactly.
        """

        text = self._expect(reply.STATUS, command, arguments)

        if expected is not None and text != expected:
            raise errors.ResponseError(text)

        return text


    def expect_integer(self, command, *arguments):
        return self._expect(reply.INTEGER, command, arguments)


    def expect_bulk(self, command, *arguments):
        """ Return the bytes of a bulk reply; None for the nil reply. """
        return self._expect(reply.BULK, command, arguments)


    def expect_multibulk(self, command, *arguments):
        """ Return the elements of a multi-bulk reply as a list; None for the
            nil reply.
        """
        return self._expect(reply.MULTIBULK, command, arguments)


    def at_least(self, minimum):
        """ True if the connected server is at version *minimum* or newer.
            A server that does not report its version is assumed to be
            current.
        """

        version = self.version

        if version is None:
            logger.debug("%s:%d did not report a version, assuming it is current", self.connection.host, self.connection.port)
            return True

        return compare_versions(version, minimum) >= 0


    def require_version(self, minimum, verb=None):
        """ Raise :class:`respclient.errors.CapabilityError` if the server is
            older than *minimum*. Nothing is sent to the server other than
            the handshake, if the connection was not already open.
        """

        if self.at_least(minimum):
            return

        if verb is None:
            what = 'this command'
        else:
            what = verb

        raise errors.CapabilityError('%s requires server version %s or newer, connected server is %s' % (what, minimum, self.connection.version))


# end of class Dispatcher


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

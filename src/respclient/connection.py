""" The :class:`Connection` owns exactly one TCP socket to the server and
    provides the synchronous request/reply contract over it: write a
    command, read a reply. It does not interpret replies beyond the
    handshake performed when the connection is established.
"""

import logging
import socket
import threading
import types

from . import config
from . import errors
from .protocol import wire
from .protocol.command import Command
from .protocol import reply

logger = logging.getLogger(__name__)


def parse_info(data):
    """ Parse the text returned by the INFO command into a dictionary. The
        text is a sequence of key:value pairs, separated by newlines or
        spaces; section headers (lines starting with '#') and anything else
        without a colon are ignored. Older servers separate pairs with
        spaces only, newer ones with CRLF.
    """

    if data is None:
        return dict()

    try:
        data = data.decode('utf-8', errors='replace')
    except AttributeError:
        pass

    pairs = dict()

    for token in data.split():
        if token.startswith('#'):
            continue

        key, separator, value = token.partition(':')
        if separator == '' or key == '':
            continue

        pairs[key] = value

    return pairs



class Connection:
    """ A single connection to the server at *host* and *port*; the
        defaults come from :mod:`respclient.config`. The socket is not
        opened until :func:`connect` is called, either directly or by
        entering a ``with`` block.

        Once connected, the server metadata retrieved with INFO is available
        via :attr:`metadata` for the lifetime of the connection.

        A :class:`Connection` is strictly sequential: the caller must read
        the reply to one command before sending the next. Nothing here
        enforces that; :class:`respclient.dispatch.Dispatcher` does.
    """

    def __init__(self, host=None, port=None):

        self.host = config.host(host)
        self.port = config.port(port)

        self.socket = None
        self.stream = None
        self._metadata = types.MappingProxyType(dict())
        self._closed = False
        self._close_lock = threading.Lock()


    def __enter__(self):
        self.connect()
        return self


    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


    def __repr__(self):
        if self.socket is None:
            state = 'closed' if self._closed else 'new'
        else:
            state = 'open'

        return 'Connection(%s:%d, %s)' % (self.host, self.port, state)


    @property
    def connected(self):
        return self.socket is not None and self._closed == False


    @property
    def closed(self):
        return self._closed


    @property
    def metadata(self):
        """ Read-only mapping of the key:value pairs the server reported
            when this connection was established.
        """
        return self._metadata


    @property
    def version(self):
        """ The server version string, or None if it was not reported. """

        metadata = self._metadata

        try:
            return metadata['redis_version']
        except KeyError:
            return metadata.get('version')


    def connect(self):
        """ Establish the socket, then issue the INFO handshake and cache
            the returned metadata. Does nothing if already connected. A
            connection that has been closed cannot be reopened; construct a
            new one instead.
        """

        if self._closed:
            raise errors.ConnectionError('connection to %s:%d has been closed' % (self.host, self.port))

        if self.socket is not None:
            return

        try:
            sock = socket.create_connection((self.host, self.port))
        except OSError as e:
            raise errors.ConnectionError('unable to connect to %s:%d: %s' % (self.host, self.port, e)) from e

        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        self.socket = sock
        self.stream = sock.makefile('rb')

        try:
            self._metadata = types.MappingProxyType(self._handshake())
        except errors.RespError as e:
            self.close()
            if isinstance(e, errors.ConnectionError):
                raise
            raise errors.ConnectionError('handshake with %s:%d failed: %s' % (self.host, self.port, e)) from e

        logger.debug("connected to %s:%d, server version %s", self.host, self.port, self.version)


    def _handshake(self):

        self.send_command(Command('INFO'))
        response = self.read_reply()

        if response.kind == reply.ERROR:
            raise errors.ResponseError(response.value)

        if response.kind != reply.BULK or response.value is None:
            raise errors.ProtocolError('unexpected INFO reply: ' + repr(response))

        return parse_info(response.value)


    def send_command(self, command):
        """ Encode *command* and write all of it to the socket. """

        data = wire.encode(command)

        sock = self.socket
        if sock is None or self._closed:
            raise errors.ConnectionError('connection to %s:%d is not open' % (self.host, self.port))

        try:
            sock.sendall(data)
        except OSError as e:
            raise errors.ConnectionError('write to %s:%d failed: %s' % (self.host, self.port, e)) from e


    def read_reply(self):
        """ Block until one complete reply has been read, and return it as a
            :class:`respclient.protocol.Reply`. A framing error closes the
            connection before the :class:`respclient.errors.ProtocolError`
            propagates.
        """

        stream = self.stream
        if stream is None or self._closed:
            raise errors.ConnectionError('connection to %s:%d is not open' % (self.host, self.port))

        try:
            return wire.read_reply(stream)
        except wire.Incomplete as e:
            self.close()
            raise errors.ConnectionError('connection to %s:%d closed: %s' % (self.host, self.port, e)) from e
        except errors.ProtocolError:
            self.close()
            raise
        except (OSError, ValueError) as e:
            # ValueError is what a buffered reader raises when it was closed
            # by another thread.
            raise errors.ConnectionError('read from %s:%d failed: %s' % (self.host, self.port, e)) from e


    def close(self):
        """ Close the socket. Safe to call any number of times, from any
            thread; a read blocked in another thread returns immediately.
        """

        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        sock = self.socket
        stream = self.stream

        if sock is not None:
            # Shutting down first is what unblocks a concurrent reader; the
            # buffered stream cannot be closed while a read holds it.
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                # Already disconnected by the remote side.
                pass

        if stream is not None:
            stream.close()

        if sock is not None:
            sock.close()
            logger.debug("closed connection to %s:%d", self.host, self.port)


# end of class Connection


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

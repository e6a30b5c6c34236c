""" The :class:`Subscriber` maintains channel subscriptions on a connection
    of its own, and delivers pushed messages to registered callbacks from a
    background thread.
"""

import logging
import threading

from . import errors
from .connection import Connection
from .protocol import reply
from .protocol.command import Command

logger = logging.getLogger(__name__)


class Subscriber:
    """ Receive published messages from the server at *host* and *port*.
        The subscriber is inactive until the first call to :func:`add`,
        which opens a dedicated connection and starts the background thread
        that reads from it; once the last subscription is removed the
        thread stops and the connection is closed.

        Callbacks are invoked with a single argument, the message payload as
        bytes, on the background thread, in the order they were registered.
        There is a single thread processing all arriving messages, so any
        callbacks should be as lightweight as possible. An exception raised
        by a callback is logged and otherwise ignored.

        The registry is protected by :attr:`lock`; the background thread
        only holds it long enough to copy the callbacks for one message,
        never while reading from the socket or invoking a callback. All
        writes to the connection happen while holding the same lock. Writers
        never read: the acknowledgment of every SUBSCRIBE and UNSUBSCRIBE is
        consumed and discarded by the background thread.
    """

    def __init__(self, host=None, port=None):

        self.host = host
        self.port = port

        self.connection = None
        self.thread = None
        self.lock = threading.RLock()

        self._channels = dict()
        self._patterns = dict()


    def __repr__(self):
        return 'Subscriber(channels=%r, patterns=%r)' % (self.channels(), self.patterns())


    @property
    def active(self):
        return self.connection is not None


    def channels(self):
        """ Return a list of the channels with registered callbacks. """

        with self.lock:
            return list(self._channels.keys())


    def patterns(self):
        """ Return a list of the patterns with registered callbacks. """

        with self.lock:
            return list(self._patterns.keys())


    def add(self, channel, callback, pattern=False):
        """ Register *callback* for messages published on *channel*. If the
            channel is new a SUBSCRIBE is sent; if it already has callbacks
            the new one is appended to them and nothing is sent. If *pattern*
            is True, *channel* is a glob-style pattern and PSUBSCRIBE is
            used instead.
        """

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        channel = _channel_name(channel)

        if pattern:
            verb = 'PSUBSCRIBE'
        else:
            verb = 'SUBSCRIBE'

        command = Command(verb, channel)

        with self.lock:
            registry = self._registry(pattern)

            try:
                callbacks = registry[channel]
            except KeyError:
                pass
            else:
                callbacks.append(callback)
                return

            started = False
            if self.connection is None:
                self._start()
                started = True

            try:
                self.connection.send_command(command)
            except errors.RespError:
                if started:
                    self._teardown()
                raise

            registry[channel] = [callback]

        logger.debug("%s %s", verb, channel)


    def remove(self, channel, pattern=False):
        """ Drop all callbacks for *channel* and send UNSUBSCRIBE (or
            PUNSUBSCRIBE, if *pattern* is True) for it. Removing the last
            subscription stops the background thread and closes the
            connection. Unknown channels are ignored.
        """

        channel = _channel_name(channel)

        if pattern:
            verb = 'PUNSUBSCRIBE'
        else:
            verb = 'UNSUBSCRIBE'

        command = Command(verb, channel)
        thread = None

        try:
            with self.lock:
                registry = self._registry(pattern)

                if channel in registry:
                    pass
                else:
                    return

                if len(self._channels) + len(self._patterns) > 1:
                    self.connection.send_command(command)
                    del registry[channel]
                else:
                    try:
                        self.connection.send_command(command)
                    finally:
                        del registry[channel]
                        thread = self._teardown()
        finally:
            self._join(thread)

        logger.debug("%s %s", verb, channel)


    def remove_all(self):
        """ Drop every subscription. UNSUBSCRIBE is sent without arguments,
            which the server interprets as all channels; PUNSUBSCRIBE is sent
            the same way if any patterns were registered. The background
            thread is stopped and the connection closed.
        """

        thread = None

        try:
            with self.lock:
                connection = self.connection

                try:
                    if connection is not None:
                        if self._channels or not self._patterns:
                            connection.send_command(Command('UNSUBSCRIBE'))
                        if self._patterns:
                            connection.send_command(Command('PUNSUBSCRIBE'))
                finally:
                    self._channels.clear()
                    self._patterns.clear()
                    thread = self._teardown()
        finally:
            self._join(thread)


    def close(self):
        """ Equivalent to :func:`remove_all`, except that a connection the
            server already dropped is not an error.
        """

        try:
            self.remove_all()
        except errors.ConnectionError as e:
            logger.debug("subscription connection already gone at close: %s", e)


    def propagate(self, registry, key, payload):
        """ Invoke every callback registered under *key* in *registry* with
            the supplied *payload*.
        """

        with self.lock:
            try:
                callbacks = tuple(registry[key])
            except KeyError:
                return

        for callback in callbacks:
            try:
                callback(payload)
            except Exception:
                logger.exception("subscription callback %r failed for %r", callback, key)


    def run(self, connection):
        """ Main loop of the background thread. Runs until *connection* is
            closed, either deliberately by :func:`remove` or
            :func:`remove_all`, or because the server dropped it.
        """

        while True:
            try:
                response = connection.read_reply()
            except errors.RespError as e:
                self._lost(connection, e)
                break

            self._pushed_incoming(response)


    def _pushed_incoming(self, response):

        if response.kind == reply.ERROR:
            logger.warning("error on subscription connection: %s", response.value)
            return

        try:
            pushed = reply.Pushed.from_reply(response)
        except ValueError as e:
            logger.warning("ignoring unexpected reply on subscription connection: %s", e)
            return

        if pushed.kind == reply.MESSAGE:
            self.propagate(self._channels, pushed.channel, pushed.payload)
        elif pushed.kind == reply.PMESSAGE:
            self.propagate(self._patterns, pushed.pattern, pushed.payload)

        # Anything else is an acknowledgment, there is nothing to do.


    def _lost(self, connection, exception):
        """ The read loop for *connection* ended. If that connection is still
            the current one, the server dropped it: every subscription is
            gone, and the subscriber reverts to being inactive.
        """

        with self.lock:
            if self.connection is connection:
                logger.warning("subscription connection to %s:%d lost: %s", connection.host, connection.port, exception)
                self._channels.clear()
                self._patterns.clear()
                self.connection = None
                self.thread = None

        connection.close()


    def _registry(self, pattern):
        if pattern:
            return self._patterns
        return self._channels


    def _start(self):

        connection = Connection(self.host, self.port)
        connection.connect()

        name = 'respclient.Subscriber.%s:%d' % (connection.host, connection.port)
        thread = threading.Thread(target=self.run, args=(connection,), name=name)
        thread.daemon = True

        self.connection = connection
        self.thread = thread
        thread.start()


    def _teardown(self):
        """ Close the current connection, which unblocks the background
            thread. Returns the thread so the caller can join it once the
            lock is released.
        """

        connection = self.connection
        thread = self.thread

        self.connection = None
        self.thread = None

        if connection is not None:
            connection.close()

        return thread


    def _join(self, thread):

        if thread is None:
            return

        # A callback can remove its own subscription; the background thread
        # cannot wait for itself to exit.

        if thread is threading.current_thread():
            return

        thread.join()


# end of class Subscriber



def _channel_name(channel):

    if channel is None:
        raise errors.PreconditionError('channel must be specified')

    try:
        channel = channel.decode('utf-8')
    except AttributeError:
        channel = str(channel)
    except UnicodeDecodeError:
        raise errors.PreconditionError('channel name is not valid UTF-8: ' + repr(channel))

    if channel == '':
        raise errors.PreconditionError('channel must be specified')

    return channel


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

""" The :class:`Client` is the typed operation surface. Each method is a
    translation of a call into a :class:`respclient.protocol.Command` plus
    a typed decode of the reply, built entirely on
    :class:`respclient.dispatch.Dispatcher` and
    :class:`respclient.subscribe.Subscriber`.
"""

import datetime
import logging

from . import errors
from .connection import parse_info
from .dispatch import Dispatcher
from .lists import List
from .protocol import reply
from .protocol import wire
from .subscribe import Subscriber

logger = logging.getLogger(__name__)

# Publish/subscribe first appeared in this server version, as did the
# multi-bulk reply to KEYS.

pubsub_version = '2.0.0'
multibulk_keys_version = '2.0.0'

key_types = frozenset(('none', 'string', 'list', 'set', 'zset', 'hash'))


def _required(value, name):

    if value is None:
        raise errors.PreconditionError(name + ' must be specified')

    return value


def _text(value):
    if value is None:
        return None
    return value.decode('utf-8')


class Client:
    """ A client for the server at *host* and *port*, defaulting to the
        values in :mod:`respclient.config`. The main connection is opened
        on first use; a second connection, dedicated to publish/subscribe,
        is only opened if :func:`subscribe` or :func:`psubscribe` is called.

        A :class:`Client` should be closed when it is no longer needed,
        either by calling :func:`close` or by using it as a context manager.
        Values can be read and written with item syntax: ``client['key']``
        returns text, ``client['key'] = value`` sets it.
    """

    def __init__(self, host=None, port=None):

        self.dispatcher = Dispatcher(host=host, port=port)
        self.host = self.dispatcher.connection.host
        self.port = self.dispatcher.connection.port
        self.subscriber = None


    def __enter__(self):
        return self


    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


    def __repr__(self):
        return 'Client(%s:%d)' % (self.host, self.port)


    def __getitem__(self, key):
        return self.get_string(key)


    def __setitem__(self, key, value):
        self.set(key, value)


    def __delitem__(self, key):
        self.delete(key)


    def __contains__(self, key):
        return self.exists(key)


    def close(self):
        """ Close every connection this client opened. Safe to call more
            than once.
        """

        subscriber = self.subscriber
        if subscriber is not None:
            subscriber.close()

        self.dispatcher.close()


    @property
    def version(self):
        return self.dispatcher.version


    @property
    def metadata(self):
        self.dispatcher.connection.connect()
        return self.dispatcher.connection.metadata


    def execute(self, verb, *arguments):
        """ Issue an arbitrary command and return the raw
            :class:`respclient.protocol.Reply`. Error replies are returned,
            not raised.
        """

        return self.dispatcher.execute(verb, *arguments)


    ### Server commands.

    def ping(self):
        return self.dispatcher.expect_status('PING', expected='PONG')


    def info(self):
        """ Return a fresh copy of the server's INFO key:value pairs. """

        return parse_info(self.dispatcher.expect_bulk('INFO'))


    def dbsize(self):
        return self.dispatcher.expect_integer('DBSIZE')


    def save(self):
        return self.dispatcher.expect_status('SAVE', expected=None)


    def bgsave(self):
        return self.dispatcher.expect_status('BGSAVE', expected=None)


    def flushdb(self):
        self.dispatcher.expect_status('FLUSHDB')


    def flushall(self):
        self.dispatcher.expect_status('FLUSHALL')


    def lastsave(self):
        """ Return the time of the last successful save as a UTC
            :class:`datetime.datetime`.
        """

        seconds = self.dispatcher.expect_integer('LASTSAVE')
        return datetime.datetime.fromtimestamp(seconds, tz=datetime.timezone.utc)


    def shutdown(self):
        """ Ask the server to shut down. A successful shutdown closes the
            connection without a reply.
        """

        try:
            self.dispatcher.expect_status('SHUTDOWN', expected=None)
        except errors.ConnectionError:
            logger.debug("server at %s:%d shut down", self.host, self.port)


    ### String commands.

    def set(self, key, value):
        _required(key, 'key')
        _required(value, 'value')
        self.dispatcher.expect_status('SET', key, value)


    def setnx(self, key, value):
        """ Set *key* only if it does not exist; True if it was set. """

        _required(key, 'key')
        _required(value, 'value')
        return self.dispatcher.expect_integer('SETNX', key, value) > 0


    def get(self, key):
        """ Return the value of *key* as bytes, or None if it is not set. """

        _required(key, 'key')
        return self.dispatcher.expect_bulk('GET', key)


    def get_string(self, key):
        return _text(self.get(key))


    def getset(self, key, value):
        """ Set *key* to *value* and return the previous value as bytes. """

        _required(key, 'key')
        _required(value, 'value')
        return self.dispatcher.expect_bulk('GETSET', key, value)


    def mset(self, mapping):
        """ Set every key/value pair in *mapping* in a single command. """

        _required(mapping, 'mapping')

        arguments = list()
        for key, value in mapping.items():
            arguments.append(_required(key, 'key'))
            arguments.append(_required(value, 'value'))

        if len(arguments) == 0:
            raise errors.PreconditionError('mapping must not be empty')

        self.dispatcher.expect_status('MSET', *arguments)


    def mget(self, *keys):
        """ Return a list with the value of each key as bytes, None for any
            key that is not set.
        """

        if len(keys) == 0:
            raise errors.PreconditionError('at least one key must be specified')

        for key in keys:
            _required(key, 'key')

        return self.dispatcher.expect_multibulk('MGET', *keys)


    def incr(self, key):
        _required(key, 'key')
        return self.dispatcher.expect_integer('INCR', key)


    def incrby(self, key, count):
        _required(key, 'key')
        return self.dispatcher.expect_integer('INCRBY', key, int(count))


    def decr(self, key):
        _required(key, 'key')
        return self.dispatcher.expect_integer('DECR', key)


    def decrby(self, key, count):
        _required(key, 'key')
        return self.dispatcher.expect_integer('DECRBY', key, int(count))


    ### Key commands.

    def exists(self, key):
        _required(key, 'key')
        return self.dispatcher.expect_integer('EXISTS', key) == 1


    def delete(self, *keys):
        """ Delete one or more keys; return the number actually removed. """

        if len(keys) == 0:
            raise errors.PreconditionError('at least one key must be specified')

        for key in keys:
            _required(key, 'key')

        return self.dispatcher.expect_integer('DEL', *keys)


    def type(self, key):
        """ Return the type of the value stored at *key* as a string, for
            example 'string' or 'set'; 'none' if the key does not exist.
        """

        _required(key, 'key')
        kind = self.dispatcher.expect_status('TYPE', key, expected=None)

        if kind in key_types:
            return kind

        raise errors.ResponseError('unknown key type: ' + repr(kind))


    def randomkey(self):
        """ Return a random key, or None if the database is empty. Older
            servers answer with a status reply, newer ones with a bulk.
        """

        response = self.dispatcher.execute('RANDOMKEY')

        if response.is_error:
            raise errors.ResponseError(response.value)

        if response.kind == reply.STATUS:
            if response.value == '':
                return None
            return response.value

        if response.kind == reply.BULK:
            return _text(response.value)

        raise errors.ResponseError('expected bulk reply, got %r' % (response))


    def rename(self, old, new):
        _required(old, 'old')
        _required(new, 'new')
        self.dispatcher.expect_status('RENAME', old, new)


    def expire(self, key, seconds):
        _required(key, 'key')
        return self.dispatcher.expect_integer('EXPIRE', key, int(seconds)) == 1


    def expireat(self, key, timestamp):
        """ Expire *key* at *timestamp*, a UNIX epoch time or a
            :class:`datetime.datetime`.
        """

        _required(key, 'key')

        if isinstance(timestamp, datetime.datetime):
            timestamp = timestamp.timestamp()

        return self.dispatcher.expect_integer('EXPIREAT', key, int(timestamp)) == 1


    def ttl(self, key):
        _required(key, 'key')
        return self.dispatcher.expect_integer('TTL', key)


    def keys(self, pattern='*'):
        """ Return a list of the key names matching *pattern*, as text.

            Servers before 2.0.0 answer KEYS with a single bulk reply of
            space-separated names; newer servers use a multi-bulk reply.
            The two cannot be told apart in advance, so the decoding is
            chosen based on the version the server reported at connect time.
        """

        _required(pattern, 'pattern')

        if self.dispatcher.at_least(multibulk_keys_version):
            names = self.dispatcher.expect_multibulk('KEYS', pattern)
            if names is None:
                return list()
        else:
            names = wire.split_tokens(self.dispatcher.expect_bulk('KEYS', pattern))

        return [_text(name) for name in names]


    ### Set commands.

    def sadd(self, key, member):
        _required(key, 'key')
        _required(member, 'member')
        return self.dispatcher.expect_integer('SADD', key, member) > 0


    def scard(self, key):
        _required(key, 'key')
        return self.dispatcher.expect_integer('SCARD', key)


    def sismember(self, key, member):
        _required(key, 'key')
        _required(member, 'member')
        return self.dispatcher.expect_integer('SISMEMBER', key, member) > 0


    def smembers(self, key):
        _required(key, 'key')
        return self.dispatcher.expect_multibulk('SMEMBERS', key)


    def srandmember(self, key):
        _required(key, 'key')
        return self.dispatcher.expect_bulk('SRANDMEMBER', key)


    def spop(self, key):
        _required(key, 'key')
        return self.dispatcher.expect_bulk('SPOP', key)


    def srem(self, key, member):
        _required(key, 'key')
        _required(member, 'member')
        return self.dispatcher.expect_integer('SREM', key, member) > 0


    def smove(self, source, destination, member):
        _required(source, 'source')
        _required(destination, 'destination')
        _required(member, 'member')
        return self.dispatcher.expect_integer('SMOVE', source, destination, member) > 0


    def _set_operation(self, verb, keys):

        if len(keys) == 0:
            raise errors.PreconditionError('at least one key must be specified')

        for key in keys:
            _required(key, 'key')

        return self.dispatcher.expect_multibulk(verb, *keys)


    def _set_store(self, verb, destination, keys):

        if destination is None or destination == '':
            raise errors.PreconditionError('destination must be specified')

        if len(keys) == 0:
            raise errors.PreconditionError('at least one key must be specified')

        for key in keys:
            _required(key, 'key')

        return self.dispatcher.expect_integer(verb, destination, *keys)


    def sunion(self, *keys):
        return self._set_operation('SUNION', keys)

    def sinter(self, *keys):
        return self._set_operation('SINTER', keys)

    def sdiff(self, *keys):
        return self._set_operation('SDIFF', keys)

    def sunionstore(self, destination, *keys):
        return self._set_store('SUNIONSTORE', destination, keys)

    def sinterstore(self, destination, *keys):
        return self._set_store('SINTERSTORE', destination, keys)

    def sdiffstore(self, destination, *keys):
        return self._set_store('SDIFFSTORE', destination, keys)


    ### List commands.

    def get_list(self, key):
        """ Return a :class:`respclient.lists.List` for the list at *key*. """

        _required(key, 'key')
        return List(self, key)


    def _push(self, verb, key, values):

        _required(key, 'key')

        if len(values) == 0:
            raise errors.PreconditionError('at least one value must be specified')

        for value in values:
            _required(value, 'value')

        return self.dispatcher.expect_integer(verb, key, *values)


    def lpush(self, key, *values):
        """ Prepend *values* to the list at *key*; return the new length. """

        return self._push('LPUSH', key, values)


    def rpush(self, key, *values):
        """ Append *values* to the list at *key*; return the new length. """

        return self._push('RPUSH', key, values)


    def llen(self, key):
        _required(key, 'key')
        return self.dispatcher.expect_integer('LLEN', key)


    def lrange(self, key, start=0, stop=-1):
        """ Return the elements of the list at *key* from *start* through
            *stop*, both inclusive, as bytes. The default range is the whole
            list.
        """

        _required(key, 'key')
        elements = self.dispatcher.expect_multibulk('LRANGE', key, int(start), int(stop))
        if elements is None:
            return list()
        return elements


    def lindex(self, key, index):
        _required(key, 'key')
        return self.dispatcher.expect_bulk('LINDEX', key, int(index))


    def lset(self, key, index, value):
        _required(key, 'key')
        _required(value, 'value')
        self.dispatcher.expect_status('LSET', key, int(index), value)


    def lrem(self, key, count, value):
        """ Remove up to *count* occurrences of *value*: from the head if
            *count* is positive, from the tail if negative, all of them if
            zero. Return the number removed.
        """

        _required(key, 'key')
        _required(value, 'value')
        return self.dispatcher.expect_integer('LREM', key, int(count), value)


    def ltrim(self, key, start, stop):
        _required(key, 'key')
        self.dispatcher.expect_status('LTRIM', key, int(start), int(stop))


    def lpop(self, key):
        _required(key, 'key')
        return self.dispatcher.expect_bulk('LPOP', key)


    def rpop(self, key):
        _required(key, 'key')
        return self.dispatcher.expect_bulk('RPOP', key)


    def sort(self, key, by=None, limit=None, get=None, descending=False,
             alpha=False, store=None):
        """ Return the sorted elements of the list or set at *key*.

            :param by: pattern naming the keys whose values are the weights;
                ``'*'`` in the pattern is replaced by each element.
            :param limit: an (offset, count) pair.
            :param get: a pattern, or a list of patterns, naming the keys to
                return in place of each element. ``'#'`` is the element
                itself.
            :param alpha: compare as text rather than as numbers.
            :param store: if set, store the result at this key instead of
                returning it, and return the number of elements stored.
        """

        _required(key, 'key')
        arguments = [key]

        if by is not None:
            arguments.extend(('BY', by))

        if limit is not None:
            try:
                offset, count = limit
            except (TypeError, ValueError):
                raise errors.PreconditionError('limit must be an (offset, count) pair')
            arguments.extend(('LIMIT', int(offset), int(count)))

        if get is not None:
            if isinstance(get, (str, bytes)):
                get = (get,)
            for pattern in get:
                arguments.extend(('GET', _required(pattern, 'get')))

        if descending:
            arguments.append('DESC')

        if alpha:
            arguments.append('ALPHA')

        if store is not None:
            if store == '':
                raise errors.PreconditionError('store must not be empty')
            arguments.extend(('STORE', store))
            return self.dispatcher.expect_integer('SORT', *arguments)

        elements = self.dispatcher.expect_multibulk('SORT', *arguments)
        if elements is None:
            return list()
        return elements


    ### Publish/subscribe.

    def publish(self, channel, data):
        """ Publish *data* on *channel*; return the number of subscribers
            that received it.
        """

        self.dispatcher.require_version(pubsub_version, 'PUBLISH')

        _required(channel, 'channel')
        _required(data, 'data')

        return self.dispatcher.expect_integer('PUBLISH', channel, data)


    def subscribe(self, channel, callback):
        """ Invoke *callback* with the payload bytes of every message
            published on *channel*. See :class:`respclient.Subscriber`.
        """

        self.dispatcher.require_version(pubsub_version, 'SUBSCRIBE')

        if self.subscriber is None:
            self.subscriber = Subscriber(self.host, self.port)

        self.subscriber.add(channel, callback)


    def psubscribe(self, pattern, callback):
        """ Invoke *callback* for every message published on a channel
            matching the glob-style *pattern*.
        """

        self.dispatcher.require_version(pubsub_version, 'PSUBSCRIBE')

        if self.subscriber is None:
            self.subscriber = Subscriber(self.host, self.port)

        self.subscriber.add(pattern, callback, pattern=True)


    def unsubscribe(self, channel=None):
        """ Stop receiving messages for *channel*, or for every channel if
            no channel is specified.
        """

        self.dispatcher.require_version(pubsub_version, 'UNSUBSCRIBE')

        if self.subscriber is None:
            return

        if channel is None:
            self.subscriber.remove_all()
        else:
            self.subscriber.remove(channel)


    def punsubscribe(self, pattern):

        self.dispatcher.require_version(pubsub_version, 'PUNSUBSCRIBE')

        if self.subscriber is None:
            return

        self.subscriber.remove(pattern, pattern=True)


# end of class Client



def connect(host=None, port=None):
    """ Return a :class:`Client` with its main connection already open. """

    client = Client(host, port)

    try:
        client.dispatcher.connection.connect()
    except errors.ConnectionError:
        client.close()
        raise

    return client


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

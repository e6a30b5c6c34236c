""" A class representation of a decoded server reply, and of the messages
    pushed to a subscribed connection.
"""

STATUS = 'status'
INTEGER = 'integer'
BULK = 'bulk'
MULTIBULK = 'multibulk'
ERROR = 'error'


class Reply:
    """ The :class:`Reply` is a tagged value: the *kind* identifies which of
        the five reply shapes arrived, the *value* holds its contents.

        ==========  =====================================================
        kind        value
        ==========  =====================================================
        status      str
        error       str, the server's error text without the leading '-'
        integer     int
        bulk        bytes, or None for the nil bulk reply
        multibulk   list, or None for the nil multi-bulk reply; elements
                    are bytes or None, and can also be int or a nested
                    list when the server sends those
        ==========  =====================================================

        :ivar kind: One of the strings in :attr:`valid_kinds`.
        :ivar value: The decoded contents, typed according to *kind*.
    """

    valid_kinds = frozenset((STATUS, INTEGER, BULK, MULTIBULK, ERROR))

    __slots__ = ('kind', 'value')

    def __init__(self, kind, value):

        if kind in self.valid_kinds:
            pass
        else:
            raise ValueError('invalid reply kind: ' + repr(kind))

        self.kind = kind
        self.value = value


    @property
    def is_error(self):
        return self.kind == ERROR


    @property
    def is_nil(self):
        """ True for the nil bulk and nil multi-bulk replies. """
        return self.value is None and self.kind in (BULK, MULTIBULK)


    def __eq__(self, other):
        if not isinstance(other, Reply):
            return NotImplemented
        return self.kind == other.kind and self.value == other.value


    def __repr__(self):
        return 'Reply(%s, %r)' % (self.kind, self.value)


# end of class Reply



def status(text):
    return Reply(STATUS, text)

def error(text):
    return Reply(ERROR, text)

def integer(number):
    return Reply(INTEGER, int(number))

def bulk(data):
    return Reply(BULK, data)

def multibulk(elements):
    return Reply(MULTIBULK, elements)



MESSAGE = 'message'
PMESSAGE = 'pmessage'

pushed_kinds = frozenset((MESSAGE, PMESSAGE,
                        'subscribe', 'unsubscribe',
                        'psubscribe', 'punsubscribe'))


class Pushed:
    """ A message delivered to a subscribed connection without a matching
        request. Only :data:`MESSAGE` and :data:`PMESSAGE` carry a *payload*;
        the others are acknowledgments of subscription changes, and their
        *count* is the number of subscriptions still active on the
        connection.

        :ivar kind: The message kind, for example 'message' or 'subscribe'.
        :ivar channel: The channel name, as text.
        :ivar payload: The message body as bytes, or None.
        :ivar pattern: For 'pmessage', the pattern that matched; else None.
        :ivar count: For acknowledgments, the subscription count; else None.
    """

    __slots__ = ('kind', 'channel', 'payload', 'pattern', 'count')

    def __init__(self, kind, channel, payload=None, pattern=None, count=None):
        self.kind = kind
        self.channel = channel
        self.payload = payload
        self.pattern = pattern
        self.count = count


    @property
    def is_data(self):
        return self.kind == MESSAGE or self.kind == PMESSAGE


    @classmethod
    def from_reply(cls, reply):
        """ Interpret a multi-bulk *reply* read from a subscribed connection.
            Raises ValueError if the reply is not a pushed message.
        """

        if reply.kind != MULTIBULK or not reply.value:
            raise ValueError('not a pushed message: ' + repr(reply))

        elements = reply.value
        kind = _text(elements[0])

        if kind in pushed_kinds:
            pass
        else:
            raise ValueError('unknown pushed message kind: ' + repr(kind))

        if kind == PMESSAGE:
            if len(elements) != 4:
                raise ValueError('pmessage must have 4 elements, not %d' % (len(elements)))
            return cls(kind, _text(elements[2]), elements[3], pattern=_text(elements[1]))

        if len(elements) != 3:
            raise ValueError('%s must have 3 elements, not %d' % (kind, len(elements)))

        if kind == MESSAGE:
            return cls(kind, _text(elements[1]), elements[2])

        # Acknowledgment. The count arrives as an integer from current
        # servers; accept a bulk rendition as well.

        count = elements[2]
        if count is not None:
            try:
                count = int(count)
            except (TypeError, ValueError):
                raise ValueError('invalid subscription count: ' + repr(count))

        return cls(kind, _text(elements[1]), count=count)


    def __repr__(self):
        return 'Pushed(%s, %r, %r)' % (self.kind, self.channel, self.payload)


# end of class Pushed



def _text(element):

    if element is None:
        return None

    try:
        return element.decode('utf-8', errors='replace')
    except AttributeError:
        return str(element)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

""" A :class:`List` presents a list stored on the server as something close
    to a Python list. Every operation is a round trip; nothing is cached
    locally, so the contents seen are always the server's.
"""


class List:
    """ The list stored at *key*, accessed through *client*. Elements are
        returned as bytes. Indexing follows Python conventions: negative
        indices count from the end, and slices exclude their stop index.
    """

    def __init__(self, client, key):

        if key is None or key == '':
            raise ValueError('key must be specified')

        self.client = client
        self.key = key


    def __repr__(self):
        return 'List(%r): %r' % (self.key, list(self))


    def __len__(self):
        return self.client.llen(self.key)


    def __iter__(self):
        return iter(self.client.lrange(self.key))


    def __getitem__(self, index):

        if isinstance(index, slice):
            return self._slice(index)

        value = self.client.lindex(self.key, index)
        if value is None:
            raise IndexError('list index out of range: ' + repr(index))

        return value


    def _slice(self, index):

        if index.step is not None and index.step != 1:
            raise ValueError('slice steps are not supported')

        start = index.start
        if start is None:
            start = 0

        # The server's stop index is inclusive.

        stop = index.stop
        if stop is None:
            stop = -1
        elif stop == 0:
            return list()
        else:
            stop = stop - 1

        return self.client.lrange(self.key, start, stop)


    def __setitem__(self, index, value):
        if isinstance(index, slice):
            raise NotImplementedError('slice assignment is not supported')

        self.client.lset(self.key, index, value)


    def __delitem__(self, index):
        raise NotImplementedError('use remove() to delete list elements by value')


    def append(self, value):
        self.client.rpush(self.key, value)


    def prepend(self, value):
        self.client.lpush(self.key, value)


    def extend(self, values):
        values = list(values)
        if len(values) > 0:
            self.client.rpush(self.key, *values)


    def pop(self):
        """ Remove and return the last element. """

        value = self.client.rpop(self.key)
        if value is None:
            raise IndexError('pop from empty list')

        return value


    def popleft(self):
        """ Remove and return the first element. """

        value = self.client.lpop(self.key)
        if value is None:
            raise IndexError('pop from empty list')

        return value


    def remove(self, value):
        """ Remove the first occurrence of *value*. """

        if self.client.lrem(self.key, 1, value) == 0:
            raise ValueError('value not in list: ' + repr(value))


    def clear(self):
        self.client.delete(self.key)


# end of class List


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

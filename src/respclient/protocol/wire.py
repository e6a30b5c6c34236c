""" Conversion between :class:`Command`/:class:`Reply` instances and bytes
    on the wire. Nothing here touches a socket: replies are read from any
    buffered binary stream that offers ``readline()`` and ``read(n)``, such
    as the file object returned by :func:`socket.socket.makefile` or an
    :class:`io.BytesIO` instance.

Reply framing, by leading byte::

    +<text>\\r\\n                  status
    -<text>\\r\\n                  error
    :<number>\\r\\n                integer
    $<length>\\r\\n<bytes>\\r\\n     bulk; $-1 is nil
    *<count>\\r\\n<reply>...       multi-bulk; *-1 is nil
"""

from __future__ import annotations

import io
from typing import List, Optional

from .. import config
from ..errors import PreconditionError, ProtocolError
from . import reply
from .command import Command, inline_safe


CRLF = b'\r\n'


class Incomplete(ProtocolError):
    """ The stream ended before a complete reply could be read. """


def encode_inline(command: Command) -> bytes:
    """ Return the inline text form of *command*: the verb and arguments
        separated by single spaces, terminated by CRLF. Only commands whose
        arguments are all plain, non-empty ASCII tokens can be sent this way.
    """

    if command.binary:
        raise PreconditionError(command.verb + ' carries binary data and cannot be sent inline')

    for argument in command.arguments:
        if not inline_safe(argument):
            raise PreconditionError('argument cannot be sent inline: ' + repr(argument))

    return b' '.join(command) + CRLF


def encode_multibulk(command: Command) -> bytes:
    """ Return the binary-safe form of *command*; every part is preceded by
        its exact byte length, so any byte value can be transmitted.
    """

    parts = list()
    parts.append(b'*%d\r\n' % (len(command)))

    for part in command:
        parts.append(b'$%d\r\n' % (len(part)))
        parts.append(part)
        parts.append(CRLF)

    return b''.join(parts)


def encode(command: Command) -> bytes:
    """ Pick the inline form when it is safe to use, otherwise fall back
        to the binary-safe form.
    """

    if command.inline:
        return encode_inline(command)
    return encode_multibulk(command)



def _readline(stream) -> bytes:
    """ Return the next line from *stream* without its CRLF terminator. """

    line = stream.readline()

    if line == b'':
        raise Incomplete('stream closed while waiting for a reply')

    if line[-2:] != CRLF:
        if line[-1:] == b'\n':
            raise ProtocolError('line not terminated by CRLF: ' + repr(line))
        raise Incomplete('stream closed in the middle of a line: ' + repr(line))

    return line[:-2]


def _read(stream, length: int) -> bytes:

    data = stream.read(length)

    if data is None or len(data) < length:
        received = 0 if data is None else len(data)
        raise Incomplete('expected %d bytes, stream closed after %d' % (length, received))

    return data


def _number(text: bytes) -> int:

    try:
        return int(text)
    except ValueError:
        raise ProtocolError('invalid number in reply header: ' + repr(text))


def _read_bulk(stream, header: bytes) -> Optional[bytes]:

    length = _number(header)

    if length == -1:
        return None
    if length < -1:
        raise ProtocolError('invalid bulk length: %d' % (length))
    if length > config.maximum_value_length:
        raise ProtocolError('bulk length exceeds %d: %d' % (config.maximum_value_length, length))

    data = _read(stream, length + 2)

    if data[-2:] != CRLF:
        raise ProtocolError('bulk reply of %d bytes not terminated by CRLF' % (length))

    return data[:-2]


def _element(stream):
    """ Read one element of a multi-bulk reply. Bulk elements are returned
        as bytes (or None), integers as int, nested multi-bulk replies as
        lists, status replies as text. A nested error is returned as its
        :class:`Reply` so it cannot be mistaken for data.
    """

    nested = read_reply(stream)

    if nested.kind == reply.ERROR:
        return nested
    return nested.value


def read_reply(stream) -> reply.Reply:
    """ Read exactly one reply from *stream*. Raises :class:`ProtocolError`
        if the framing is invalid, and :class:`Incomplete` if the stream
        ends before the reply does.
    """

    line = _readline(stream)
    prefix = line[:1]
    rest = line[1:]

    if prefix == b'+':
        return reply.status(rest.decode('utf-8', errors='replace'))

    if prefix == b'-':
        return reply.error(rest.decode('utf-8', errors='replace'))

    if prefix == b':':
        return reply.integer(_number(rest))

    if prefix == b'$':
        return reply.bulk(_read_bulk(stream, rest))

    if prefix == b'*':
        count = _number(rest)

        if count == -1:
            return reply.multibulk(None)
        if count < -1:
            raise ProtocolError('invalid multi-bulk count: %d' % (count))

        elements = list()
        for index in range(count):
            elements.append(_element(stream))

        return reply.multibulk(elements)

    raise ProtocolError('unknown reply type: ' + repr(line[:32]))


def decode(data: bytes) -> reply.Reply:
    """ Decode a single complete reply from *data*. Leftover bytes after the
        reply are considered a framing error.
    """

    stream = io.BytesIO(data)
    decoded = read_reply(stream)

    if stream.read(1) != b'':
        raise ProtocolError('unexpected bytes after reply')

    return decoded


def parse_command(data: bytes) -> Command:
    """ Decode an encoded command, in either form, back into a
        :class:`Command`. This is the inverse of :func:`encode`.
    """

    stream = io.BytesIO(data)

    if data[:1] == b'*':
        line = _readline(stream)
        count = _number(line[1:])
        if count < 1:
            raise ProtocolError('command must have at least a verb')

        parts = list()
        for index in range(count):
            line = _readline(stream)
            if line[:1] != b'$':
                raise ProtocolError('expected bulk argument, got ' + repr(line[:32]))
            bulk = _read_bulk(stream, line[1:])
            if bulk is None:
                raise ProtocolError('command arguments cannot be nil')
            parts.append(bulk)
    else:
        line = _readline(stream)
        parts = line.split()
        if len(parts) == 0:
            raise ProtocolError('empty inline command')

    if stream.read(1) != b'':
        raise ProtocolError('unexpected bytes after command')

    return Command(parts[0], *parts[1:])


def split_tokens(data: Optional[bytes]) -> List[bytes]:
    """ Older servers answer some list-valued commands (KEYS, notably) with
        a single bulk reply containing space-separated tokens instead of a
        multi-bulk reply. Return those tokens.
    """

    if data is None or len(data) == 0:
        return list()

    return data.split(b' ')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

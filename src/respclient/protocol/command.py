""" The :class:`Command` is the in-memory form of a single request: a verb
    and an ordered sequence of arguments. Arguments are normalized to bytes
    as the command is built, and the size limit on values is enforced here,
    before anything can reach a socket.
"""

from __future__ import annotations

from typing import Tuple

from .. import config
from ..errors import PreconditionError


# Bytes that make an argument unsafe for the inline form: control
# characters, space, the quote characters, and DEL.

_inline_unsafe = frozenset(list(range(0x21)) + [0x22, 0x27, 0x7f])


def as_bytes(argument, name='argument') -> bytes:
    """ Return the wire representation of a single *argument*. Text is
        encoded as UTF-8, integers and floats are rendered in decimal, and
        bytes-like objects are passed through.
    """

    if argument is None:
        raise PreconditionError(name + ' must be specified')

    if isinstance(argument, bytes):
        return argument

    if isinstance(argument, (bytearray, memoryview)):
        return bytes(argument)

    if isinstance(argument, bool):
        # bool is an int subclass; '1' and '0' are what the server expects.
        return b'1' if argument else b'0'

    if isinstance(argument, (int, float)):
        return repr(argument).encode()

    if isinstance(argument, str):
        return argument.encode('utf-8')

    raise PreconditionError('cannot send %s as a command argument: %r' % (name, type(argument)))


def inline_safe(argument: bytes) -> bool:
    """ True if *argument* can be sent unquoted in an inline command. """

    if len(argument) == 0:
        return False

    for byte in argument:
        if byte in _inline_unsafe or byte > 0x7e:
            return False

    return True


class Command:
    """ A single request to the server. The *verb* is case-insensitive and
        is stored upper-case; the *arguments* can be any mix of text, bytes,
        and numbers.

        A command built with at least one bytes-like argument is marked as
        *binary*, and is always sent in the length-prefixed form regardless
        of what the bytes contain. Any argument whose encoded form is longer
        than :data:`respclient.config.maximum_value_length` bytes is refused,
        text included.

        Instances are immutable; two commands compare equal if their verbs
        and encoded arguments are identical.

        :ivar verb: The command name, upper-case.
        :ivar arguments: A tuple of bytes, one per argument.
        :ivar binary: True if the command carries raw bytes.
    """

    __slots__ = ('_verb', '_arguments', '_binary')

    def __init__(self, verb, *arguments):

        if verb is None or verb == '' or verb == b'':
            raise PreconditionError('command verb must be specified')

        try:
            verb = verb.decode()
        except AttributeError:
            verb = str(verb)

        verb = verb.upper()
        if not inline_safe(verb.encode()):
            raise PreconditionError('invalid command verb: ' + repr(verb))

        limit = config.maximum_value_length
        binary = False
        encoded = list()

        for argument in arguments:
            if isinstance(argument, (bytes, bytearray, memoryview)):
                binary = True

            # Text is measured after encoding; a short string can still be
            # too many bytes.

            argument = as_bytes(argument)
            length = len(argument)
            if length > limit:
                raise PreconditionError('value exceeds %d bytes: %d' % (limit, length))

            encoded.append(argument)

        object.__setattr__(self, '_verb', verb)
        object.__setattr__(self, '_arguments', tuple(encoded))
        object.__setattr__(self, '_binary', binary)


    def __setattr__(self, name, value):
        raise AttributeError('Command instances are immutable')


    @property
    def verb(self) -> str:
        return self._verb


    @property
    def arguments(self) -> Tuple[bytes, ...]:
        return self._arguments


    @property
    def binary(self) -> bool:
        return self._binary


    @property
    def inline(self) -> bool:
        """ True if every argument can be sent in the inline text form. """

        if self._binary:
            return False

        for argument in self._arguments:
            if not inline_safe(argument):
                return False

        return True


    def __iter__(self):
        """ Iterate over every part of the command as bytes, verb first. """

        yield self._verb.encode()
        for argument in self._arguments:
            yield argument


    def __len__(self):
        return len(self._arguments) + 1


    def __eq__(self, other):
        if not isinstance(other, Command):
            return NotImplemented
        return self._verb == other._verb and self._arguments == other._arguments


    def __hash__(self):
        return hash((self._verb, self._arguments))


    def __repr__(self):
        shown = list()
        for argument in self._arguments:
            if len(argument) > 32:
                shown.append(repr(argument[:32]) + '...')
            else:
                shown.append(repr(argument))

        return 'Command(%s)' % (', '.join([repr(self._verb)] + shown))


# end of class Command


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

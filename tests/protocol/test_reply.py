import pytest

from respclient.protocol import reply
from respclient.protocol import wire


def test_invalid_kind():

    with pytest.raises(ValueError):
        reply.Reply('unknown', None)


def test_message():

    decoded = wire.decode(b'*3\r\n$7\r\nmessage\r\n$2\r\nch\r\n$2\r\nhi\r\n')
    pushed = reply.Pushed.from_reply(decoded)

    assert pushed.kind == 'message'
    assert pushed.is_data
    assert pushed.channel == 'ch'
    assert pushed.payload == b'hi'
    assert pushed.pattern is None


def test_pmessage():

    decoded = reply.multibulk([b'pmessage', b'news.*', b'news.art', b'painted'])
    pushed = reply.Pushed.from_reply(decoded)

    assert pushed.kind == 'pmessage'
    assert pushed.pattern == 'news.*'
    assert pushed.channel == 'news.art'
    assert pushed.payload == b'painted'


def test_acknowledgments():

    pushed = reply.Pushed.from_reply(reply.multibulk([b'subscribe', b'ch', 1]))
    assert pushed.kind == 'subscribe'
    assert pushed.is_data == False
    assert pushed.count == 1

    # Unsubscribing from everything while subscribed to nothing.

    pushed = reply.Pushed.from_reply(reply.multibulk([b'unsubscribe', None, 0]))
    assert pushed.channel is None
    assert pushed.count == 0


def test_not_pushed():

    for bad in (reply.status('OK'),
                reply.multibulk(None),
                reply.multibulk([]),
                reply.multibulk([b'bogus', b'ch', b'x']),
                reply.multibulk([b'message', b'ch'])):
        with pytest.raises(ValueError):
            reply.Pushed.from_reply(bad)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

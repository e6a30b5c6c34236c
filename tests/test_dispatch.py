import pytest

import respclient
from respclient import dispatch
from respclient.protocol import Command


def test_version_tuple():

    assert dispatch.version_tuple('2.2.0') == (2, 2, 0)
    assert dispatch.version_tuple('2.6.0-rc1') == (2, 6, 0)
    assert dispatch.version_tuple('10.0') == (10, 0)
    assert dispatch.version_tuple('x.1') == (0, 1)


def test_compare_versions():

    assert dispatch.compare_versions('1.2.0', '2.0.0') == -1
    assert dispatch.compare_versions('2.0', '2.0.0') == 0
    assert dispatch.compare_versions('2.2.0', '2.0.0') == 1

    # A first-character comparison gets this one wrong.
    assert dispatch.compare_versions('10.0.1', '2.0.0') == 1
    assert dispatch.compare_versions('2.10.0', '2.9.9') == 1


def test_execute(server):

    dispatcher = respclient.Dispatcher(host=server.host, port=server.port)

    response = dispatcher.execute(Command('SET', 'key', 'value'))
    assert response.kind == 'status'
    assert response.value == 'OK'

    response = dispatcher.execute('GET', 'key')
    assert response.kind == 'bulk'
    assert response.value == b'value'

    with pytest.raises(TypeError):
        dispatcher.execute(Command('GET', 'key'), 'extra')

    dispatcher.close()


def test_expect(server):

    dispatcher = respclient.Dispatcher(host=server.host, port=server.port)

    assert dispatcher.expect_status('SET', 'key', '5') == 'OK'
    assert dispatcher.expect_status('PING', expected='PONG') == 'PONG'
    assert dispatcher.expect_status('PING', expected=None) == 'PONG'
    assert dispatcher.expect_integer('INCR', 'key') == 6
    assert dispatcher.expect_bulk('GET', 'key') == b'6'
    assert dispatcher.expect_bulk('GET', 'missing') is None
    assert dispatcher.expect_multibulk('MGET', 'key', 'missing') == [b'6', None]

    with pytest.raises(respclient.ResponseError):
        dispatcher.expect_status('PING')

    with pytest.raises(respclient.ResponseError):
        dispatcher.expect_integer('GET', 'key')

    with pytest.raises(respclient.ResponseError):
        dispatcher.expect_multibulk('GET', 'key')

    # Mismatches consume the whole reply; the connection is still in step.

    assert dispatcher.expect_bulk('GET', 'key') == b'6'

    dispatcher.close()


def test_error_reply(server):
    """ An error reply raises ResponseError from every typed helper, with
        the server's text, and leaves the connection usable.
    """

    server.script['BROKEN'] = (b'-ERR wrong type\r\n', False)
    dispatcher = respclient.Dispatcher(host=server.host, port=server.port)

    helpers = (
        dispatcher.expect_status,
        dispatcher.expect_integer,
        dispatcher.expect_bulk,
        dispatcher.expect_multibulk,
    )

    for helper in helpers:
        with pytest.raises(respclient.ResponseError) as caught:
            helper('BROKEN')

        assert 'wrong type' in str(caught.value)
        assert caught.value.message == 'ERR wrong type'

        assert dispatcher.expect_status('PING', expected='PONG') == 'PONG'

    # The raw reply is available without raising.

    response = dispatcher.execute('BROKEN')
    assert response.is_error
    assert response.value == 'ERR wrong type'

    dispatcher.close()


def test_require_version(server, old_server):

    current = respclient.Dispatcher(host=server.host, port=server.port)
    current.require_version('2.0.0')
    assert current.at_least('2.2.0')
    assert not current.at_least('2.2.1')
    current.close()

    old = respclient.Dispatcher(host=old_server.host, port=old_server.port)

    with pytest.raises(respclient.CapabilityError) as caught:
        old.require_version('2.0.0', 'PUBLISH')

    assert 'PUBLISH' in str(caught.value)
    assert isinstance(caught.value, respclient.PreconditionError)

    # Only the handshake went over the wire.

    assert old_server.verbs() == ['INFO']
    old.close()


def test_unknown_version(server):

    server.script['INFO'] = (b'$13\r\nrole:master\r\n\r\n', False)

    dispatcher = respclient.Dispatcher(host=server.host, port=server.port)
    assert dispatcher.version is None
    dispatcher.require_version('2.0.0')
    dispatcher.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

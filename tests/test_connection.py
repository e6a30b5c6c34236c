import socket
import pytest

import respclient
from respclient import connection
from respclient.protocol import Command

import fakeserver


def unused_port():
    sock = socket.socket()
    sock.bind(('127.0.0.1', 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def test_parse_info():

    text = b'# Server\r\nredis_version:2.2.0\r\nos:Linux 5.4\r\n\r\n# Clients\r\nconnected_clients:1\r\n'
    parsed = connection.parse_info(text)

    assert parsed['redis_version'] == '2.2.0'
    assert parsed['connected_clients'] == '1'
    assert 'Server' not in parsed

    # Old servers separate pairs with spaces.

    parsed = connection.parse_info('version:1.2.0 role:master')
    assert parsed == {'version': '1.2.0', 'role': 'master'}

    assert connection.parse_info(None) == {}


def test_defaults():

    instance = respclient.Connection()
    assert instance.host == respclient.config.default_host
    assert instance.port == respclient.config.default_port
    assert instance.connected == False


def test_connect(server):

    instance = respclient.Connection(server.host, server.port)
    instance.connect()

    assert instance.connected
    assert instance.version == '2.2.0'
    assert instance.metadata['process_id'] == '1'
    assert server.verbs() == ['INFO']

    with pytest.raises(TypeError):
        instance.metadata['version'] = '9.9.9'

    # A second connect() is a no-op.

    instance.connect()
    assert server.verbs() == ['INFO']

    instance.send_command(Command('PING'))
    assert instance.read_reply().value == 'PONG'

    instance.close()


def test_close_twice(server):

    instance = respclient.Connection(server.host, server.port)
    instance.connect()

    instance.close()
    assert instance.closed
    assert instance.connected == False

    instance.close()
    assert instance.closed

    with pytest.raises(respclient.ConnectionError):
        instance.send_command(Command('PING'))

    with pytest.raises(respclient.ConnectionError):
        instance.read_reply()

    with pytest.raises(respclient.ConnectionError):
        instance.connect()


def test_close_unopened():

    instance = respclient.Connection('localhost', unused_port())
    instance.close()
    instance.close()


def test_context_manager(server):

    with respclient.Connection(server.host, server.port) as instance:
        assert instance.connected

    assert instance.closed


def test_refused():

    instance = respclient.Connection('127.0.0.1', unused_port())

    with pytest.raises(respclient.ConnectionError):
        instance.connect()

    # Also a builtin ConnectionError, for callers that only know that one.

    assert issubclass(respclient.ConnectionError, ConnectionError)


def test_failed_handshake(server):

    server.script['INFO'] = (b'-NOAUTH Authentication required.\r\n', False)

    instance = respclient.Connection(server.host, server.port)

    with pytest.raises(respclient.ConnectionError):
        instance.connect()

    assert instance.closed


def test_protocol_error_closes(server):

    server.script['GARBAGE'] = (b'!not a reply\r\n', False)

    instance = respclient.Connection(server.host, server.port)
    instance.connect()
    instance.send_command(Command('GARBAGE'))

    with pytest.raises(respclient.ProtocolError):
        instance.read_reply()

    assert instance.closed


def test_premature_close(server):

    server.script['TRUNCATED'] = (b'$10\r\nshort', True)

    instance = respclient.Connection(server.host, server.port)
    instance.connect()
    instance.send_command(Command('TRUNCATED'))

    with pytest.raises(respclient.ConnectionError):
        instance.read_reply()

    assert instance.closed


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

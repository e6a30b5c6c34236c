import pytest

import respclient
import fakeserver


@pytest.fixture
def server():
    """ A fake server reporting a version recent enough for every command
        the client knows about.
    """

    instance = fakeserver.Server('2.2.0')
    yield instance
    instance.stop()


@pytest.fixture
def old_server():
    """ A fake server reporting a version that predates publish/subscribe
        and the multi-bulk KEYS reply.
    """

    instance = fakeserver.Server('1.2.0')
    yield instance
    instance.stop()


@pytest.fixture
def client(server):

    instance = respclient.Client(server.host, server.port)
    yield instance
    instance.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

""" Default connection parameters. The environment variables are read once,
    at import time; explicit arguments passed to a :class:`respclient.Client`
    or :class:`respclient.connection.Connection` always take precedence.
"""

import os


default_host = os.environ.get('RESPCLIENT_HOST', 'localhost')
default_port = int(os.environ.get('RESPCLIENT_PORT', 6379))

# Largest single value the server accepts, in bytes.

maximum_value_length = 1073741824


def host(host=None):
    """ Return *host* if it is set, otherwise the configured default. """

    if host is None or host == '':
        return default_host
    return host


def port(port=None):
    """ Return *port* as an integer if it is set, otherwise the configured
        default.
    """

    if port is None:
        return default_port
    return int(port)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

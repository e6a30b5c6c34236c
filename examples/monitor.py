""" Print every message published on the channels named on the command
    line, until interrupted. For example::

        python monitor.py localhost:6379 news weather
"""

import sys
import threading

import respclient


def printer(channel):

    def callback(payload):
        print('%s: %s' % (channel, payload.decode('utf-8', errors='replace')))

    return callback


def main():

    if len(sys.argv) < 3:
        print('usage: monitor.py host:port channel [channel ...]')
        sys.exit(1)

    host, port = sys.argv[1].split(':', 1)

    with respclient.Client(host, port) as client:
        print('connected to server version %s' % (client.version))

        for channel in sys.argv[2:]:
            client.subscribe(channel, printer(channel))

        try:
            threading.Event().wait()
        except KeyboardInterrupt:
            pass


if __name__ == '__main__':
    main()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

""" The wire codec: pure conversions between commands, replies, and bytes.
    Nothing in this subpackage performs I/O of its own.
"""

from . import command
from . import reply
from . import wire

from .command import Command
from .reply import Reply, Pushed

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

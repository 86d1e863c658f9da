"""
Core networking components: the listener and the per-client connection.

    SocketServer      Binds, listens, accepts one connection at a time
    Connection        One client: single bounded read, write, close
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer, ACCEPT_POLL_INTERVAL

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
    "ACCEPT_POLL_INTERVAL",
]

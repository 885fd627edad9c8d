"""
Core networking components: the TCP listener and the client connection
wrapper.
"""

from .connection import Connection, ConnectionState, RawRequest
from .socket_server import SocketServer

__all__ = ["Connection", "ConnectionState", "RawRequest", "SocketServer"]

"""Transport layer: TCP socket to the netdump server."""

from .tcp_connection import TCPConnection

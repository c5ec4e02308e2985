"""
Transport components for uds_http_core.

This module provides the duplex stream abstraction consumed by the
client, an in-memory implementation for tests and socket-backed
implementations for Unix domain and TCP connections.
"""

from .stream import DuplexStream
from .mock import MockDuplexStream
from .socket_stream import DEFAULT_DOCKER_SOCKET, SocketBackend, SocketStream
from .utils import (
    create_tcp_socket,
    create_unix_socket,
    get_address_family,
    is_ipv6_address,
    set_socket_timeout,
    validate_port,
    validate_socket_path,
)

__all__ = [
    "DuplexStream",
    "MockDuplexStream",
    "SocketStream",
    "SocketBackend",
    "DEFAULT_DOCKER_SOCKET",
    "create_tcp_socket",
    "create_unix_socket",
    "get_address_family",
    "is_ipv6_address",
    "set_socket_timeout",
    "validate_port",
    "validate_socket_path",
]

"""
Network utilities for uds_http_core.

This module provides helper functions for creating and configuring
the sockets that back a SocketStream.
"""

import os
import socket
from typing import Optional, Union


# sun_path holds 108 bytes including the terminating NUL
MAX_UNIX_PATH_LENGTH = 107


def create_unix_socket() -> socket.socket:
    """
    Create a blocking Unix domain stream socket.
    
    Raises:
        OSError: If socket creation fails (e.g. on platforms without AF_UNIX)
    """
    if not hasattr(socket, "AF_UNIX"):
        raise OSError("Unix domain sockets are not supported on this platform")
    return socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)


def create_tcp_socket(host: str) -> socket.socket:
    """
    Create a blocking TCP socket for connecting to ``host``.
    
    Args:
        host: Hostname or IP address, used to pick the address family
    
    Returns:
        Socket with Nagle's algorithm disabled
    """
    sock = socket.socket(get_address_family(host), socket.SOCK_STREAM)
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    return sock


def is_ipv6_address(host: str) -> bool:
    """Check if a host string is an IPv6 address."""
    try:
        socket.inet_pton(socket.AF_INET6, host)
        return True
    except OSError:
        return False


def get_address_family(host: str) -> int:
    """
    Determine the appropriate address family for a host.
    
    Returns:
        Socket address family (AF_INET or AF_INET6)
    """
    if is_ipv6_address(host):
        return socket.AF_INET6
    return socket.AF_INET


def set_socket_timeout(sock: socket.socket, timeout: Optional[float]) -> None:
    """
    Set socket timeout.
    
    Args:
        sock: Socket object
        timeout: Timeout in seconds (None for blocking)
    """
    if timeout is not None and timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")
    sock.settimeout(timeout)


def validate_port(port: Union[int, str]) -> int:
    """
    Validate and convert port to integer.
    
    Raises:
        ValueError: If port is invalid
    """
    try:
        port_int = int(port)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid port: {port}")
    
    if not (1 <= port_int <= 65535):
        raise ValueError(f"Port must be between 1 and 65535, got {port_int}")
    
    return port_int


def validate_socket_path(path: Union[str, "os.PathLike[str]"]) -> str:
    """
    Validate a Unix domain socket path.
    
    Raises:
        ValueError: If the path is empty or too long for sun_path
    """
    path = os.fspath(path)
    if not path:
        raise ValueError("socket path must not be empty")
    if len(os.fsencode(path)) > MAX_UNIX_PATH_LENGTH:
        raise ValueError(
            f"socket path is longer than {MAX_UNIX_PATH_LENGTH} bytes: {path}"
        )
    return path

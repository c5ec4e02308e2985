"""
Socket-backed streams for uds_http_core.

This module adapts a connected socket to the DuplexStream interface
and provides SocketBackend for opening Unix domain and TCP connections,
such as the management socket of a container daemon.
"""

import logging
import os
import socket
from typing import Optional, Union

from ..exceptions import ConnectionError, StreamError, TimeoutError
from .stream import DuplexStream
from .utils import (
    create_tcp_socket,
    create_unix_socket,
    set_socket_timeout,
    validate_port,
    validate_socket_path,
)

logger = logging.getLogger(__name__)

DEFAULT_DOCKER_SOCKET = "/var/run/docker.sock"

# Largest single read issued by SocketStream.read_exact
READ_CHUNK_SIZE = 65536


class SocketStream(DuplexStream):
    """
    DuplexStream over a connected, blocking socket.
    
    Reads go through a buffered reader and writes through a buffered
    writer, both created with ``socket.makefile``. Socket timeouts
    surface as TimeoutError, other OS failures as StreamError.
    """
    
    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._reader = sock.makefile("rb")
        self._writer = sock.makefile("wb")
        self._closed = False
    
    def _check_open(self) -> None:
        if self._closed:
            raise StreamError("Stream is closed")
    
    def _timeout_error(self, operation: str) -> TimeoutError:
        return TimeoutError(f"{operation} timed out", timeout=self._sock.gettimeout())
    
    def read_until(self, delimiter: bytes = b"\n") -> bytes:
        """Read up to and including ``delimiter``, or whatever remains."""
        self._check_open()
        try:
            if delimiter == b"\n":
                return self._reader.readline()
            
            data = bytearray()
            while not data.endswith(delimiter):
                byte = self._reader.read(1)
                if not byte:
                    break
                data += byte
            return bytes(data)
        except socket.timeout as e:
            raise self._timeout_error("read") from e
        except OSError as e:
            raise StreamError(f"read failed: {e}", cause=e) from e
    
    def read_exact(self, size: int) -> bytes:
        """
        Read exactly ``size`` bytes or fail with StreamError.

        Data is read in pieces of at most READ_CHUNK_SIZE bytes, so the
        buffer only grows as fast as the peer actually sends.
        """
        self._check_open()
        data = bytearray()
        try:
            while len(data) < size:
                piece = self._reader.read(min(size - len(data), READ_CHUNK_SIZE))
                if not piece:
                    break
                data += piece
        except socket.timeout as e:
            raise self._timeout_error("read") from e
        except (OverflowError, MemoryError) as e:
            raise StreamError(f"cannot read {size} bytes: {e}", cause=e) from e
        except OSError as e:
            raise StreamError(f"read failed: {e}", cause=e) from e

        if len(data) < size:
            raise StreamError(
                f"unexpected end of stream: expected {size} bytes, got {len(data)}"
            )
        return bytes(data)
    
    def write(self, data: bytes) -> None:
        """Write ``data`` into the send buffer."""
        self._check_open()
        try:
            self._writer.write(data)
        except socket.timeout as e:
            raise self._timeout_error("write") from e
        except OSError as e:
            raise StreamError(f"write failed: {e}", cause=e) from e
    
    def flush(self) -> None:
        """Send everything buffered so far."""
        self._check_open()
        try:
            self._writer.flush()
        except socket.timeout as e:
            raise self._timeout_error("write") from e
        except OSError as e:
            raise StreamError(f"write failed: {e}", cause=e) from e
    
    def close(self) -> None:
        """Close the buffered files and the socket."""
        if self._closed:
            return
        self._closed = True
        for closeable in (self._writer, self._reader, self._sock):
            try:
                closeable.close()
            except OSError as e:
                logger.warning(f"Error closing socket stream: {e}")
    
    @property
    def is_closed(self) -> bool:
        return self._closed
    
    @property
    def socket(self) -> socket.socket:
        """The underlying socket."""
        return self._sock


class SocketBackend:
    """
    Opens socket connections and wraps them as SocketStreams.
    
    The timeout given to a connect method is used for the connect call
    and stays on the socket as the read/write deadline.
    """
    
    DEFAULT_TIMEOUT: Optional[float] = None  # block indefinitely
    
    def __init__(self, timeout: Optional[float] = None) -> None:
        self._timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
    
    def connect_unix(
        self,
        path: Union[str, "os.PathLike[str]"] = DEFAULT_DOCKER_SOCKET,
        timeout: Optional[float] = None,
    ) -> SocketStream:
        """
        Connect to a Unix domain socket.
        
        Args:
            path: Filesystem path of the listening socket.
            timeout: Optional deadline in seconds overriding the backend's.
        
        Returns:
            A SocketStream representing the connection.
        
        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the connection times out.
        """
        path = validate_socket_path(path)
        try:
            sock = create_unix_socket()
        except OSError as e:
            raise ConnectionError(f"cannot create socket: {e}", cause=e) from e
        
        return self._connect(sock, path, path, timeout)
    
    def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
    ) -> SocketStream:
        """
        Connect to a TCP endpoint.
        
        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the connection times out.
        """
        port = validate_port(port)
        try:
            sock = create_tcp_socket(host)
        except OSError as e:
            raise ConnectionError(f"cannot create socket: {e}", cause=e) from e
        
        return self._connect(sock, (host, port), f"{host}:{port}", timeout)
    
    def _connect(self, sock, address, label: str, timeout: Optional[float]) -> SocketStream:
        effective_timeout = timeout if timeout is not None else self._timeout
        try:
            set_socket_timeout(sock, effective_timeout)
            sock.connect(address)
        except socket.timeout as e:
            sock.close()
            raise TimeoutError(f"connect to {label} timed out", timeout=effective_timeout) from e
        except OSError as e:
            sock.close()
            raise ConnectionError(f"cannot connect to {label}: {e}", cause=e) from e
        except ValueError:
            sock.close()
            raise
        
        logger.debug(f"Connected to {label}")
        return SocketStream(sock)

"""
HTTP/1.1 client for uds_http_core.

This module implements the HTTPClient class that runs request/response
exchanges over a DuplexStream it owns, one exchange at a time.
"""

import logging
import threading
import time
from enum import Enum
from typing import Any, Dict, Optional

from .decoder import ResponseDecoder
from .encoder import RequestEncoder
from .exceptions import ConnectionError
from .http_primitives import Request, Response
from .network.socket_stream import DEFAULT_DOCKER_SOCKET, SocketBackend
from .network.stream import DuplexStream

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """States of a client connection."""
    NEW = "new"           # Stream attached, not yet used
    ACTIVE = "active"     # Exchange in progress
    IDLE = "idle"         # Ready for the next exchange
    CLOSED = "closed"     # Stream closed, cannot be reused


class HTTPClient:
    """
    Synchronous HTTP/1.1 client over a single duplex stream.

    The client owns its stream for its whole lifetime. ``execute()``
    writes one request, reads its response and leaves the stream ready
    for the next exchange. Any failure during an exchange closes the
    stream, since its read position can no longer be trusted.
    """

    # Default configuration
    DEFAULT_MAX_REQUESTS = 100  # Maximum requests per stream

    def __init__(
        self,
        stream: DuplexStream,
        max_requests: Optional[int] = None,
        encoder: Optional[RequestEncoder] = None,
    ):
        """
        Initialize the client.

        Args:
            stream: The DuplexStream to use for communication
            max_requests: Maximum number of exchanges on this stream
            encoder: Request encoder (defaults to UTF-8 RequestEncoder)
        """
        self._stream = stream
        self._encoder = encoder or RequestEncoder()
        self._state = ConnectionState.NEW
        self._state_lock = threading.Lock()

        # Configuration
        self._max_requests = max_requests or self.DEFAULT_MAX_REQUESTS

        # Metrics
        self._request_count = 0
        self._bytes_sent = 0
        self._bytes_received = 0
        self._total_request_time = 0.0
        self._errors_count = 0
        self._last_request_time: Optional[float] = None

        logger.debug("HTTP client initialized")

    @classmethod
    def open_unix(
        cls,
        path: str = DEFAULT_DOCKER_SOCKET,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> "HTTPClient":
        """
        Connect to a Unix domain socket and wrap it in a client.

        Args:
            path: Socket path, the Docker daemon socket by default
            timeout: Connect and read/write deadline in seconds
            **kwargs: Passed to the HTTPClient constructor
        """
        stream = SocketBackend(timeout=timeout).connect_unix(path)
        return cls(stream, **kwargs)

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def execute(self, request: Request) -> Response:
        """
        Run a complete request/response exchange.

        Args:
            request: The HTTP request to send

        Returns:
            The decoded HTTP response

        Raises:
            ConnectionError: If the client is closed, busy or exhausted
            StreamError: If reading or writing the stream fails
            EncodingError: If the response contains undecodable lines
            ProtocolError: If the response violates HTTP/1.1 framing
        """
        self._acquire_connection()

        start_time = time.time()
        self._request_count += 1
        self._last_request_time = start_time

        try:
            self._send_request(request)
            response = self._receive_response()
        except Exception as e:
            duration = time.time() - start_time
            self._errors_count += 1
            logger.error(
                f"Request {self._request_count} failed: {e} ({duration:.3f}s)"
            )
            # the stream position is unknown after a failed exchange
            self._mark_closed()
            raise

        duration = time.time() - start_time
        self._total_request_time += duration
        self._release_connection()

        logger.debug(
            f"Request {self._request_count}: {request.method.value} {request.target} "
            f"-> {response.status_code} ({duration:.3f}s)"
        )
        return response

    def _send_request(self, request: Request) -> None:
        data = self._encoder.encode(request)
        self._stream.write(data)
        self._stream.flush()
        self._bytes_sent += len(data)

    def _receive_response(self) -> Response:
        decoder = ResponseDecoder(self._stream)
        try:
            return decoder.read_response()
        finally:
            self._bytes_received += decoder.bytes_read

    def _acquire_connection(self) -> None:
        """
        Acquire the stream for one exchange.

        Raises:
            ConnectionError: If the stream is not available
        """
        with self._state_lock:
            if self._state == ConnectionState.CLOSED:
                raise ConnectionError("Connection is closed")

            if self._state == ConnectionState.ACTIVE:
                raise ConnectionError("Connection is busy")

            exhausted = self._request_count >= self._max_requests
            if not exhausted:
                self._state = ConnectionState.ACTIVE

        if exhausted:
            self.close()
            raise ConnectionError(
                f"Connection exceeded max requests ({self._max_requests})"
            )

    def _release_connection(self) -> None:
        with self._state_lock:
            if self._state == ConnectionState.ACTIVE:
                self._state = ConnectionState.IDLE

    def _mark_closed(self) -> None:
        with self._state_lock:
            self._state = ConnectionState.CLOSED
        self._stream.close()

    def close(self) -> None:
        """
        Close the client and its stream.
        """
        with self._state_lock:
            if self._state == ConnectionState.CLOSED:
                return
            self._state = ConnectionState.CLOSED
        self._stream.close()

        logger.debug(f"Connection closed after {self._request_count} requests")

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_closed(self) -> bool:
        """Check if the client is closed."""
        return self._state == ConnectionState.CLOSED

    @property
    def is_idle(self) -> bool:
        """Check if the client is ready for another exchange."""
        return self._state == ConnectionState.IDLE

    @property
    def metrics(self) -> Dict[str, Any]:
        """
        Get client metrics.

        Returns:
            Dictionary with client metrics
        """
        return {
            "request_count": self._request_count,
            "bytes_sent": self._bytes_sent,
            "bytes_received": self._bytes_received,
            "total_request_time": self._total_request_time,
            "errors_count": self._errors_count,
            "last_request_time": self._last_request_time,
            "average_request_time": (
                self._total_request_time / self._request_count
                if self._request_count > 0 else 0.0
            ),
            "error_rate": (
                self._errors_count / self._request_count
                if self._request_count > 0 else 0.0
            ),
            "state": self._state.value,
        }

    def reset_metrics(self) -> None:
        """Reset client metrics."""
        self._request_count = 0
        self._bytes_sent = 0
        self._bytes_received = 0
        self._total_request_time = 0.0
        self._errors_count = 0
        self._last_request_time = None

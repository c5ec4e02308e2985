"""
Custom exceptions for uds_http_core.

This module defines the exception hierarchy used throughout
the library. Every failure of a request/response exchange is
fatal for that exchange: nothing is retried or recovered.
"""

from typing import Optional


class HTTPCoreError(Exception):
    """Base exception for all uds_http_core errors."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConnectionError(HTTPCoreError):
    """Raised when a connection cannot be opened or used."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Connection error: {message}", cause)


class StreamError(HTTPCoreError):
    """Raised when reading from or writing to the stream fails."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Stream error: {message}", cause)


class EncodingError(HTTPCoreError):
    """Raised when a line that must be text cannot be decoded."""
    
    def __init__(
        self,
        message: str,
        raw_line: Optional[bytes] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        if raw_line is not None:
            message = f"{message}: {raw_line!r}"
        super().__init__(f"Encoding error: {message}", cause)
        self.raw_line = raw_line


class ProtocolError(HTTPCoreError):
    """Raised when the peer violates HTTP/1.1 message framing."""
    
    def __init__(
        self,
        message: str,
        line: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        if line is not None:
            message = f"{message}: {line!r}"
        super().__init__(f"Protocol error: {message}", cause)
        self.line = line


class TimeoutError(HTTPCoreError):
    """Raised when a stream operation exceeds its deadline."""
    
    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        if timeout is not None:
            message = f"{message} (timeout: {timeout}s)"
        super().__init__(f"Timeout error: {message}")

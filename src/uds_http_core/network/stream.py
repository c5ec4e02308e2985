"""
Duplex stream interface for uds_http_core.

This module defines the DuplexStream interface that every transport
(Unix socket, TCP socket, pipe, in-memory buffer) must satisfy to
carry a request/response exchange.
"""

from abc import ABC, abstractmethod


class DuplexStream(ABC):
    """
    Interface for blocking, bidirectional byte streams.
    
    Reads are buffered and sequential: a stream hands out bytes in the
    order the peer sent them, either up to a delimiter or in exact-size
    pieces. Writes may be buffered until ``flush()`` is called.
    """
    
    @abstractmethod
    def read_until(self, delimiter: bytes = b"\n") -> bytes:
        """
        Read up to and including the next delimiter.
        
        Args:
            delimiter: The byte sequence that ends the read.
        
        Returns:
            The data read, including the delimiter. If the stream ends
            first, the remaining bytes are returned without a delimiter;
            ``b""`` means the stream is exhausted.
        
        Raises:
            StreamError: If the underlying read fails.
        """
        pass
    
    @abstractmethod
    def read_exact(self, size: int) -> bytes:
        """
        Read exactly ``size`` bytes.
        
        Raises:
            StreamError: If the stream ends before ``size`` bytes arrive,
                or the underlying read fails.
        """
        pass
    
    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Write all of ``data`` to the stream.
        
        Raises:
            StreamError: If the underlying write fails.
        """
        pass
    
    @abstractmethod
    def flush(self) -> None:
        """Push any buffered writes to the peer."""
        pass
    
    @abstractmethod
    def close(self) -> None:
        """
        Close the stream and cleanup resources.
        
        Closing an already closed stream does nothing.
        """
        pass
    
    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """
        Check if the stream is closed.
        
        Returns:
            True if the stream is closed, False otherwise.
        """
        pass

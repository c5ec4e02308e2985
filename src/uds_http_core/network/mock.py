"""
Mock stream implementation for testing.

This module provides an in-memory DuplexStream that can be used to
exercise the encoder, decoder and client without a real socket.
"""

from typing import List

from ..exceptions import StreamError
from .stream import DuplexStream


class MockDuplexStream(DuplexStream):
    """
    Mock duplex stream for testing.
    
    Reads are served from a preloaded buffer; writes are recorded
    and can be inspected through ``written_data``.
    """
    
    def __init__(self, data: bytes = b""):
        """
        Initialize the mock stream.
        
        Args:
            data: Initial data to be available for reading.
        """
        self._data = data
        self._position = 0
        self._closed = False
        self._write_buffer: List[bytes] = []
        self._pending: List[bytes] = []
        self.flush_count = 0
    
    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
    
    def read_until(self, delimiter: bytes = b"\n") -> bytes:
        """Read up to and including ``delimiter``, or whatever remains."""
        self._check_open()
        
        end = self._data.find(delimiter, self._position)
        if end == -1:
            end = len(self._data)
        else:
            end += len(delimiter)
        
        result = self._data[self._position:end]
        self._position = end
        return result
    
    def read_exact(self, size: int) -> bytes:
        """Read exactly ``size`` bytes or fail with StreamError."""
        self._check_open()
        
        end = self._position + size
        result = self._data[self._position:end]
        self._position = min(end, len(self._data))
        if len(result) < size:
            raise StreamError(
                f"unexpected end of stream: expected {size} bytes, got {len(result)}"
            )
        return result
    
    def write(self, data: bytes) -> None:
        """Buffer ``data`` until the next flush."""
        self._check_open()
        self._pending.append(data)
    
    def flush(self) -> None:
        """Move buffered writes into ``written_data``."""
        self._check_open()
        self._write_buffer.extend(self._pending)
        self._pending.clear()
        self.flush_count += 1
    
    def close(self) -> None:
        """Close the mock stream."""
        self._closed = True
    
    @property
    def is_closed(self) -> bool:
        """Check if the mock stream is closed."""
        return self._closed
    
    @property
    def written_data(self) -> bytes:
        """Get all data that was flushed to the stream."""
        return b"".join(self._write_buffer)
    
    @property
    def remaining_data(self) -> bytes:
        """Get the data that has not been read yet."""
        return self._data[self._position:]
    
    def add_data(self, data: bytes) -> None:
        """
        Add data to be available for reading.
        
        Args:
            data: The data to add.
        """
        self._data += data

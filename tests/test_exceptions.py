"""
Unit tests for custom exceptions.

Tests the exception hierarchy to ensure proper error handling
and cause tracking.
"""

import pytest

from uds_http_core.exceptions import (
    HTTPCoreError,
    ConnectionError,
    EncodingError,
    ProtocolError,
    StreamError,
    TimeoutError,
)


class TestHTTPCoreError:
    """Test base HTTPCoreError class."""
    
    def test_basic_creation(self) -> None:
        """Test creating basic HTTPCoreError."""
        error = HTTPCoreError("Test error message")
        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.cause is None
    
    def test_with_cause(self) -> None:
        """Test creating HTTPCoreError with cause."""
        original_error = ValueError("Original error")
        error = HTTPCoreError("Test error message", cause=original_error)
        assert error.cause == original_error


class TestStreamError:
    """Test StreamError class."""
    
    def test_basic_creation(self) -> None:
        error = StreamError("unexpected end of stream")
        assert str(error) == "Stream error: unexpected end of stream"
        assert error.cause is None
    
    def test_with_cause(self) -> None:
        original_error = OSError("Broken pipe")
        error = StreamError("write failed", cause=original_error)
        assert error.cause is original_error


class TestEncodingError:
    """Test EncodingError class."""
    
    def test_includes_raw_line(self) -> None:
        """Test that the offending bytes are part of the message."""
        error = EncodingError("cannot decode header line", raw_line=b"X-Bad: \xff\r\n")
        assert error.message == (
            "Encoding error: cannot decode header line: b'X-Bad: \\xff\\r\\n'"
        )
        assert error.raw_line == b"X-Bad: \xff\r\n"
    
    def test_without_raw_line(self) -> None:
        error = EncodingError("cannot decode status line")
        assert str(error) == "Encoding error: cannot decode status line"
        assert error.raw_line is None


class TestProtocolError:
    """Test ProtocolError class."""
    
    def test_basic_creation(self) -> None:
        error = ProtocolError("missing transfer-encoding or content-length")
        assert str(error) == "Protocol error: missing transfer-encoding or content-length"
        assert error.line is None
    
    def test_includes_line(self) -> None:
        """Test that the offending line is quoted in the message."""
        error = ProtocolError("cannot read chunk length", line="zz")
        assert str(error) == "Protocol error: cannot read chunk length: 'zz'"
        assert error.line == "zz"


class TestTimeoutError:
    """Test TimeoutError class."""
    
    def test_with_timeout_value(self) -> None:
        error = TimeoutError("read timed out", timeout=5.0)
        assert str(error) == "Timeout error: read timed out (timeout: 5.0s)"


class TestExceptionHierarchy:
    """Test exception hierarchy and inheritance."""
    
    @pytest.mark.parametrize(
        "error_class",
        [ConnectionError, EncodingError, ProtocolError, StreamError, TimeoutError],
    )
    def test_inheritance(self, error_class) -> None:
        """Test that all exceptions inherit from HTTPCoreError."""
        assert issubclass(error_class, HTTPCoreError)
    
    def test_exception_raising(self) -> None:
        """Test that exceptions can be raised and caught as HTTPCoreError."""
        with pytest.raises(HTTPCoreError, match="Protocol error: bad framing"):
            raise ProtocolError("bad framing")
        
        with pytest.raises(HTTPCoreError, match="Connection error: Connection is closed"):
            raise ConnectionError("Connection is closed")

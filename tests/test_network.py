"""
Tests for the stream interface and its implementations.

MockDuplexStream is tested directly; SocketStream and SocketBackend
are tested over real local sockets (socketpair and a temporary Unix
domain listener).
"""

import socket
import threading

import pytest

from uds_http_core.client import HTTPClient
from uds_http_core.decoder import decode_response
from uds_http_core.exceptions import (
    ConnectionError,
    HTTPCoreError,
    StreamError,
    TimeoutError,
)
from uds_http_core.http_primitives import Request
from uds_http_core.network.socket_stream import READ_CHUNK_SIZE
from uds_http_core.network import (
    DuplexStream,
    MockDuplexStream,
    SocketBackend,
    SocketStream,
    validate_port,
    validate_socket_path,
)

unix_only = pytest.mark.skipif(
    not hasattr(socket, "AF_UNIX"), reason="requires Unix domain sockets"
)


class TestMockDuplexStream:
    """Test cases for MockDuplexStream."""
    
    def test_is_duplex_stream(self) -> None:
        assert isinstance(MockDuplexStream(), DuplexStream)
    
    def test_read_until(self) -> None:
        stream = MockDuplexStream(b"line one\r\nline two\nrest")
        
        assert stream.read_until() == b"line one\r\n"
        assert stream.read_until(b"\n") == b"line two\n"
        assert stream.read_until() == b"rest"
        assert stream.read_until() == b""
    
    def test_read_until_custom_delimiter(self) -> None:
        stream = MockDuplexStream(b"head\r\n\r\nbody")
        assert stream.read_until(b"\r\n\r\n") == b"head\r\n\r\n"
        assert stream.remaining_data == b"body"
    
    def test_read_exact(self) -> None:
        stream = MockDuplexStream(b"hello world")
        
        assert stream.read_exact(5) == b"hello"
        assert stream.read_exact(0) == b""
        assert stream.read_exact(6) == b" world"
    
    def test_read_exact_short(self) -> None:
        stream = MockDuplexStream(b"abc")
        with pytest.raises(StreamError, match="expected 5 bytes, got 3"):
            stream.read_exact(5)
    
    def test_write_requires_flush(self) -> None:
        stream = MockDuplexStream()
        
        stream.write(b"hello")
        stream.write(b" world")
        assert stream.written_data == b""
        
        stream.flush()
        assert stream.written_data == b"hello world"
        assert stream.flush_count == 1
    
    def test_add_data(self) -> None:
        stream = MockDuplexStream(b"a")
        stream.add_data(b"b\n")
        assert stream.read_until() == b"ab\n"
    
    def test_closed_stream(self) -> None:
        stream = MockDuplexStream(b"data")
        stream.close()
        
        assert stream.is_closed
        with pytest.raises(RuntimeError, match="Stream is closed"):
            stream.read_until()
        with pytest.raises(RuntimeError, match="Stream is closed"):
            stream.write(b"data")


class TestDuplexStreamInterface:
    """Test the abstract interface."""
    
    def test_cannot_instantiate(self) -> None:
        with pytest.raises(TypeError):
            DuplexStream()
    
    def test_incomplete_implementation(self) -> None:
        class ReadOnlyStream(DuplexStream):
            def read_until(self, delimiter=b"\n"):
                return b""
        
        with pytest.raises(TypeError):
            ReadOnlyStream()


@unix_only
class TestSocketStream:
    """Test SocketStream over a connected socket pair."""
    
    @pytest.fixture
    def socket_pair(self):
        left, right = socket.socketpair()
        yield left, right
        left.close()
        right.close()
    
    def test_read_until_and_exact(self, socket_pair) -> None:
        left, right = socket_pair
        stream = SocketStream(left)
        right.sendall(b"HTTP/1.1 200 OK\r\nbody-bytes")
        right.shutdown(socket.SHUT_WR)
        
        assert stream.read_until() == b"HTTP/1.1 200 OK\r\n"
        assert stream.read_exact(4) == b"body"
        assert stream.read_until(b"--") == b"-bytes"
        assert stream.read_until() == b""
        stream.close()
    
    def test_short_read(self, socket_pair) -> None:
        left, right = socket_pair
        stream = SocketStream(left)
        right.sendall(b"abc")
        right.shutdown(socket.SHUT_WR)
        
        with pytest.raises(StreamError, match="expected 10 bytes, got 3"):
            stream.read_exact(10)
        stream.close()

    def test_read_exact_spans_several_reads(self, socket_pair) -> None:
        left, right = socket_pair
        stream = SocketStream(left)
        payload = bytes(range(256)) * 600

        sender = threading.Thread(target=right.sendall, args=(payload,))
        sender.start()
        data = stream.read_exact(len(payload))
        sender.join()

        assert len(payload) > READ_CHUNK_SIZE
        assert data == payload
        stream.close()

    def test_oversized_content_length(self, socket_pair) -> None:
        """A length beyond any buffer size is a short read, not a crash."""
        left, right = socket_pair
        stream = SocketStream(left)
        right.sendall(
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Length: 99999999999999999999999\r\n"
            b"\r\n"
            b"abc"
        )
        right.shutdown(socket.SHUT_WR)

        with pytest.raises(HTTPCoreError) as exc_info:
            decode_response(stream)
        assert isinstance(exc_info.value, StreamError)
        assert "got 3" in str(exc_info.value)
        stream.close()

    def test_oversized_chunk_size(self, socket_pair) -> None:
        left, right = socket_pair
        stream = SocketStream(left)
        right.sendall(
            b"HTTP/1.1 200 OK\r\n"
            b"Transfer-Encoding: chunked\r\n"
            b"\r\n"
            b"ffffffffffffffffffffff\r\n"
            b"abc"
        )
        right.shutdown(socket.SHUT_WR)

        with pytest.raises(StreamError, match="unexpected end of stream"):
            decode_response(stream)
        stream.close()

    def test_oversized_read_through_client(self, socket_pair) -> None:
        left, right = socket_pair
        client = HTTPClient(SocketStream(left))
        right.sendall(
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Length: 99999999999999999999999\r\n"
            b"\r\n"
        )
        right.shutdown(socket.SHUT_WR)

        with pytest.raises(StreamError):
            client.execute(Request(path="/images/json"))
        assert client.is_closed

    def test_write_and_flush(self, socket_pair) -> None:
        left, right = socket_pair
        stream = SocketStream(left)
        
        stream.write(b"GET / HTTP/1.1\r\n")
        stream.write(b"\r\n")
        stream.flush()
        
        assert right.recv(1024) == b"GET / HTTP/1.1\r\n\r\n"
        stream.close()
    
    def test_read_timeout(self, socket_pair) -> None:
        left, _ = socket_pair
        left.settimeout(0.05)
        stream = SocketStream(left)
        
        with pytest.raises(TimeoutError, match="read timed out"):
            stream.read_until()
        stream.close()
    
    def test_close(self, socket_pair) -> None:
        left, _ = socket_pair
        stream = SocketStream(left)
        
        stream.close()
        stream.close()
        
        assert stream.is_closed
        with pytest.raises(StreamError, match="Stream is closed"):
            stream.read_until()


@unix_only
class TestSocketBackend:
    """Test SocketBackend against a temporary Unix domain listener."""
    
    @pytest.fixture
    def unix_server(self, tmp_path):
        """Serve one canned response per connection on a Unix socket."""
        path = str(tmp_path / "daemon.sock")
        listener = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        listener.bind(path)
        listener.listen(1)
        received = []
        
        def serve():
            conn, _ = listener.accept()
            with conn:
                data = b""
                while not data.endswith(b"\r\n\r\n"):
                    chunk = conn.recv(1024)
                    if not chunk:
                        break
                    data += chunk
                received.append(data)
                conn.sendall(
                    b"HTTP/1.1 200 OK\r\n"
                    b"Content-Type: application/json\r\n"
                    b"Transfer-Encoding: chunked\r\n"
                    b"\r\n"
                    b"2\r\n[]\r\n"
                    b"0\r\n\r\n"
                )
        
        thread = threading.Thread(target=serve, daemon=True)
        thread.start()
        yield path, received
        thread.join(timeout=5)
        listener.close()
    
    def test_connect_unix_exchange(self, unix_server) -> None:
        path, received = unix_server
        stream = SocketBackend(timeout=5).connect_unix(path)
        
        with HTTPClient(stream) as client:
            response = client.execute(Request.get("/images/json").build())
        
        assert response.status_code == 200
        assert response.body == b"[]"
        assert received == [b"GET /images/json HTTP/1.1\r\nHost: localhost\r\n\r\n"]
        assert stream.is_closed
    
    def test_open_unix(self, unix_server) -> None:
        path, _ = unix_server
        
        with HTTPClient.open_unix(path, timeout=5) as client:
            response = client.execute(Request(path="/_ping"))
        
        assert response.text() == "[]"
    
    def test_connect_unix_missing_socket(self, tmp_path) -> None:
        backend = SocketBackend()
        with pytest.raises(ConnectionError, match="cannot connect to"):
            backend.connect_unix(str(tmp_path / "missing.sock"))
    
    def test_connect_tcp_refused(self) -> None:
        # bind then close to get a port nobody listens on
        probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
        probe.close()
        
        with pytest.raises(ConnectionError, match="cannot connect to 127.0.0.1"):
            SocketBackend(timeout=2).connect_tcp("127.0.0.1", port)


class TestUtils:
    """Test network helper validation."""
    
    def test_validate_port(self) -> None:
        assert validate_port("2375") == 2375
        with pytest.raises(ValueError, match="Invalid port"):
            validate_port("docker")
        with pytest.raises(ValueError, match="between 1 and 65535"):
            validate_port(70000)
    
    def test_validate_socket_path(self) -> None:
        assert validate_socket_path("/var/run/docker.sock") == "/var/run/docker.sock"
        with pytest.raises(ValueError, match="must not be empty"):
            validate_socket_path("")
        with pytest.raises(ValueError, match="longer than"):
            validate_socket_path("/" + "x" * 200)

"""
Pytest configuration for uds_http_core tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

from typing import Callable, List, Optional

import h11
import pytest

from uds_http_core.network.mock import MockDuplexStream


class H11ServerStream(MockDuplexStream):
    """
    In-memory stream with an h11 server on the other end.
    
    Every flushed request is parsed by h11; once a request is complete
    the ``respond`` callback builds the reply as h11 events, which are
    serialized by h11 and queued for the client to read.
    """
    
    def __init__(self, respond: Callable[[h11.Request, bytes], List[h11.Event]]) -> None:
        super().__init__()
        self._server = h11.Connection(h11.SERVER)
        self._respond = respond
        self._request: Optional[h11.Request] = None
        self._body: List[bytes] = []
        self.requests: List[h11.Request] = []
        self.bodies: List[bytes] = []
    
    def flush(self) -> None:
        data = b"".join(self._pending)
        super().flush()
        self._server.receive_data(data)
        self._process_events()
    
    def _process_events(self) -> None:
        while True:
            event = self._server.next_event()
            if event is h11.NEED_DATA or event is h11.PAUSED:
                return
            if isinstance(event, h11.Request):
                self._request = event
                self._body = []
            elif isinstance(event, h11.Data):
                self._body.append(bytes(event.data))
            elif isinstance(event, h11.EndOfMessage):
                body = b"".join(self._body)
                self.requests.append(self._request)
                self.bodies.append(body)
                for reply in self._respond(self._request, body):
                    self.add_data(self._server.send(reply))
                self._server.start_next_cycle()
                return


@pytest.fixture
def mock_stream():
    """Create an empty in-memory stream."""
    return MockDuplexStream()


@pytest.fixture
def h11_server():
    """Create an in-memory stream served by an h11 server."""
    def _create(respond: Callable[[h11.Request, bytes], List[h11.Event]]) -> H11ServerStream:
        return H11ServerStream(respond)
    return _create


@pytest.fixture
def sample_headers():
    """Sample request headers for testing."""
    return {
        "Content-Type": "application/json",
        "User-Agent": "uds_http_core/0.1.0",
        "X-Registry-Auth": "e30=",
    }


@pytest.fixture
def sample_params():
    """Sample query parameters for testing."""
    return {
        "name": "nvim",
        "image": "ubuntu",
        "limit": 10,
    }


@pytest.fixture
def content_length_response():
    """Raw response framed by Content-Length."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type: text/plain\r\n"
        b"Content-Length: 9\r\n"
        b"\r\n"
        b"test body"
    )


@pytest.fixture
def chunked_response():
    """Raw response with a chunked body."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Transfer-Encoding: chunked\r\n"
        b"\r\n"
        b"4\r\ntest\r\n"
        b"5\r\n body\r\n"
        b"0\r\n"
        b"\r\n"
    )

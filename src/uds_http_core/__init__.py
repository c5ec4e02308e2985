"""
uds_http_core - HTTP/1.1 framing for local daemon sockets

A minimal, synchronous HTTP/1.1 client layer that serializes requests
and parses responses over any duplex byte stream, such as the Unix
domain socket of a container-runtime daemon.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .http_primitives import (
    BodyFraming,
    FramingKind,
    HeaderMap,
    Method,
    ParamMap,
    Request,
    RequestBuilder,
    Response,
)
from .encoder import RequestEncoder, encode_request
from .decoder import ResponseDecoder, decode_response, resolve_body_framing
from .client import HTTPClient, ConnectionState
from .exceptions import (
    HTTPCoreError,
    ConnectionError,
    EncodingError,
    ProtocolError,
    StreamError,
    TimeoutError,
)
from .network import DuplexStream, MockDuplexStream, SocketBackend, SocketStream

__all__ = [
    "BodyFraming",
    "FramingKind",
    "HeaderMap",
    "Method",
    "ParamMap",
    "Request",
    "RequestBuilder",
    "Response",
    "RequestEncoder",
    "encode_request",
    "ResponseDecoder",
    "decode_response",
    "resolve_body_framing",
    "HTTPClient",
    "ConnectionState",
    "HTTPCoreError",
    "ConnectionError",
    "EncodingError",
    "ProtocolError",
    "StreamError",
    "TimeoutError",
    "DuplexStream",
    "MockDuplexStream",
    "SocketBackend",
    "SocketStream",
]

"""
HTTP/1.1 request serialization for uds_http_core.

Turns a Request into the exact bytes written to the stream:

    <METHOD> <path>[?<params>] HTTP/1.1\r\n
    Host: <host>\r\n
    <name>: <value>\r\n            (one per caller header)
    \r\n
    <body>\r\n                     (only when a body is present)

No Content-Length or Transfer-Encoding header is added; callers that
send a body to a server expecting one must set it themselves.
"""

from .http_primitives import Request

CRLF = b"\r\n"
HTTP_VERSION = "HTTP/1.1"


class RequestEncoder:
    """Serializes Request objects to HTTP/1.1 wire format."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def encode_head(self, request: Request) -> bytes:
        """Encode the request line and header block, blank line included."""
        lines = [
            f"{request.method.value} {request.target} {HTTP_VERSION}",
            f"Host: {request.host_header}",
        ]
        if request.headers is not None:
            lines.extend(
                f"{name}: {value}" for name, value in request.headers.rendered_items()
            )

        head = b"".join(line.encode(self._encoding) + CRLF for line in lines)
        return head + CRLF

    def encode(self, request: Request) -> bytes:
        """
        Encode a complete request.

        Args:
            request: The request to serialize

        Returns:
            The bytes to write to the stream
        """
        data = self.encode_head(request)
        if request.body is not None:
            data += request.body + CRLF
        return data


_default_encoder = RequestEncoder()


def encode_request(request: Request) -> bytes:
    """Encode ``request`` with the default UTF-8 encoder."""
    return _default_encoder.encode(request)

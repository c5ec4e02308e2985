"""
HTTP/1.1 response parsing for uds_http_core.

This module implements the ResponseDecoder, which reads a single
response from a DuplexStream: status line, header block, then a body
framed by the status code, Transfer-Encoding or Content-Length.

A response either decodes completely or raises; after any error the
stream position is undefined and the connection must be discarded.
"""

import logging
import re
from typing import List, Optional, Tuple

from .exceptions import EncodingError, ProtocolError, StreamError
from .http_primitives import (
    NO_BODY_STATUS_CODES,
    BodyFraming,
    FramingKind,
    HeaderMap,
    Response,
)
from .network.stream import DuplexStream

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"[0-9A-Fa-f]+")
_DECIMAL_RE = re.compile(r"[0-9]+")
_BLANK_LINES = (b"\r\n", b"\n")


def resolve_body_framing(status_code: int, headers: HeaderMap) -> BodyFraming:
    """
    Decide how the body of a response is delimited.

    Args:
        status_code: The response status code
        headers: The decoded response headers

    Returns:
        The BodyFraming to use

    Raises:
        ProtocolError: If the response needs a body but names no valid framing
    """
    if status_code in NO_BODY_STATUS_CODES:
        return BodyFraming.none()

    if headers.get_text("transfer-encoding") == "chunked":
        return BodyFraming.chunked()

    content_length = headers.get_text("content-length")
    if content_length is not None:
        if not _DECIMAL_RE.fullmatch(content_length):
            raise ProtocolError("invalid content-length", line=content_length)
        return BodyFraming.fixed_length(int(content_length))

    raise ProtocolError("missing transfer-encoding or content-length")


def parse_status_line(line: str) -> int:
    """Extract the status code from a status line such as ``HTTP/1.1 200 OK``."""
    tokens = line.split()
    if len(tokens) < 2:
        raise ProtocolError("missing status code", line=line.rstrip("\r\n"))

    status = tokens[1]
    if not _DECIMAL_RE.fullmatch(status):
        raise ProtocolError("status code is not a number", line=line.rstrip("\r\n"))
    return int(status)


def parse_header_line(line: str) -> Tuple[str, str]:
    """
    Split a header line at its first colon.

    Returns:
        The lower-cased name and the stripped value
    """
    name, sep, value = line.partition(":")
    name = name.strip()
    if not sep or not name or any(char.isspace() for char in name):
        raise ProtocolError("invalid header line", line=line.rstrip("\r\n"))
    return name.lower(), value.strip()


def parse_chunk_size(line: str) -> int:
    """Parse a chunk-size line, ignoring any chunk extensions."""
    size = line.split(";", 1)[0].strip()
    if not _HEX_RE.fullmatch(size):
        raise ProtocolError("cannot read chunk length", line=line.rstrip("\r\n"))
    return int(size, 16)


class ResponseDecoder:
    """
    Reads one HTTP/1.1 response from a DuplexStream.

    The decoder is strictly sequential and never reads past the end of
    the response it decodes, so a stream can carry several exchanges
    one after another.
    """

    def __init__(self, stream: DuplexStream, encoding: str = "utf-8") -> None:
        self._stream = stream
        self._encoding = encoding
        self.bytes_read = 0

    def read_response(self) -> Response:
        """
        Read and decode a complete response.

        Returns:
            The decoded Response

        Raises:
            StreamError: On read failures or truncated bodies
            EncodingError: If a line that must be text cannot be decoded
            ProtocolError: If the response violates HTTP/1.1 framing
        """
        status_code = self._read_status()
        headers = self._read_headers()

        framing = resolve_body_framing(status_code, headers)
        logger.debug(f"Response status {status_code}, framing {framing.kind.value}")

        body: Optional[bytes]
        if framing.kind is FramingKind.NONE:
            body = None
        elif framing.kind is FramingKind.CHUNKED:
            body = self._read_chunked_body()
        else:
            body = self._read_exact(framing.length)

        return Response(status_code=status_code, headers=headers, body=body)

    def _read_line(self) -> bytes:
        line = self._stream.read_until(b"\n")
        self.bytes_read += len(line)
        return line

    def _read_exact(self, size: int) -> bytes:
        data = self._stream.read_exact(size)
        self.bytes_read += len(data)
        return data

    def _decode(self, raw: bytes, what: str) -> str:
        try:
            return raw.decode(self._encoding)
        except UnicodeDecodeError as e:
            raise EncodingError(f"cannot decode {what}", raw_line=raw, cause=e) from e

    def _read_status(self) -> int:
        raw = self._read_line()
        if not raw:
            raise ProtocolError("unexpected end of stream before status line")
        return parse_status_line(self._decode(raw, "status line"))

    def _read_headers(self) -> HeaderMap:
        items: List[Tuple[str, str]] = []
        while True:
            raw = self._read_line()
            if not raw:
                raise ProtocolError("unexpected end of stream while reading headers")
            if raw in _BLANK_LINES:
                break
            items.append(parse_header_line(self._decode(raw, "header line")))
        try:
            return HeaderMap(items)
        except ValueError as e:
            raise ProtocolError(f"invalid header: {e}", cause=e) from e

    def _read_chunked_body(self) -> bytes:
        chunks: List[bytes] = []
        while True:
            raw = self._read_line()
            if not raw:
                raise StreamError("unexpected end of stream while reading chunked body")

            size = parse_chunk_size(self._decode(raw, "chunk size line"))
            if size == 0:
                self._discard_trailers()
                break

            chunks.append(self._read_exact(size))

            # chunk data is followed by CRLF
            terminator = self._read_line()
            if terminator not in _BLANK_LINES:
                raise ProtocolError(
                    "missing CRLF after chunk data",
                    line=terminator.decode(self._encoding, errors="replace"),
                )

        body = b"".join(chunks)
        logger.debug(f"Read chunked body: {len(chunks)} chunks, {len(body)} bytes")
        return body

    def _discard_trailers(self) -> None:
        while True:
            raw = self._read_line()
            if not raw or raw in _BLANK_LINES:
                return
            logger.debug(f"Discarding trailer line {raw!r}")


def decode_response(stream: DuplexStream) -> Response:
    """Read a single response from ``stream``."""
    return ResponseDecoder(stream).read_response()

"""
HTTP primitives for uds_http_core.

This module defines the core data structures for HTTP requests and responses.
Requests and responses are immutable; requests are assembled incrementally
with a RequestBuilder and frozen by ``build()``.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import (
    Dict,
    Iterable,
    Iterator,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)


# A header or query parameter value is either text or an integer.
FieldValue = Union[str, int]
FieldItems = Union[Mapping, Iterable[Tuple[str, FieldValue]]]
StatusCode = int

DEFAULT_HOST = "localhost"

# Status codes whose responses never carry a body
NO_BODY_STATUS_CODES = frozenset({204, 304})

_FORBIDDEN_VALUE_CHARS = frozenset("\r\n")
_FORBIDDEN_NAME_CHARS = frozenset(" \t\r\n:")
_FORBIDDEN_PARAM_CHARS = frozenset(" \t\r\n&#")


def format_value(value: FieldValue) -> str:
    """Render a field value for the wire; integers render as decimal."""
    if isinstance(value, bool):
        raise ValueError("field values must be str or int, not bool")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    raise ValueError(f"field values must be str or int, got {type(value).__name__}")


class Method(Enum):
    """
    HTTP request methods supported by the client.

    UPDATE is another name for PUT rather than a method of its own.
    UPDATE is not a registered HTTP method and daemons reject it, so
    requests built with it carry the standard PUT token on the wire.
    """
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    UPDATE = "PUT"  # alias of PUT
    DELETE = "DELETE"
    PATCH = "PATCH"

    @classmethod
    def parse(cls, token: Union[str, "Method"]) -> "Method":
        """Resolve a method from its wire token, ignoring case."""
        if isinstance(token, Method):
            return token
        if not isinstance(token, str):
            raise ValueError(f"unsupported HTTP method: {token!r}")
        try:
            return cls[token.upper()]
        except KeyError:
            raise ValueError(f"unsupported HTTP method: {token!r}") from None

    def __str__(self) -> str:
        return self.value


class _FieldMap(Mapping, ABC):
    """
    Immutable, deterministically ordered mapping of wire fields.

    Entries are keyed by a normalized form of the name; the last write
    for a normalized key wins, including the spelling of the name.
    Iteration is lexicographic by normalized key.
    """

    def __init__(self, items: Optional[FieldItems] = None) -> None:
        self._entries: Dict[str, Tuple[str, FieldValue]] = {}
        if items is None:
            return
        if isinstance(items, Mapping):
            items = items.items()
        for name, value in items:
            self._store(name, value)

    @staticmethod
    def _normalize(name: str) -> str:
        return name

    @abstractmethod
    def _validate(self, name: str, value: FieldValue) -> None:
        """Reject names or values that cannot be written to the wire."""

    def _store(self, name: str, value: FieldValue) -> None:
        if not isinstance(name, str):
            raise ValueError(f"field names must be str, got {type(name).__name__}")
        format_value(value)
        self._validate(name, value)
        self._entries[self._normalize(name)] = (name, value)

    def _copy_with(self, name: str, value: FieldValue) -> "_FieldMap":
        new = type(self)()
        new._entries = dict(self._entries)
        new._store(name, value)
        return new

    def __getitem__(self, name: str) -> FieldValue:
        return self._entries[self._normalize(name)][1]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._normalize(name) in self._entries

    def __iter__(self) -> Iterator[str]:
        for key in sorted(self._entries):
            yield self._entries[key][0]

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, _FieldMap):
            return type(self) is type(other) and list(self.items()) == list(other.items())
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self.items()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"

    def rendered_items(self) -> Iterator[Tuple[str, str]]:
        """Iterate (name, wire value) pairs in wire order."""
        for name, value in self.items():
            yield name, format_value(value)


class HeaderMap(_FieldMap):
    """
    HTTP header collection with case-insensitive lookup.

    The spelling of the most recent write is kept for the wire, while
    lookups, membership tests and ordering use the lower-cased name.
    """

    @staticmethod
    def _normalize(name: str) -> str:
        return name.lower()

    def _validate(self, name: str, value: FieldValue) -> None:
        if not name or _FORBIDDEN_NAME_CHARS.intersection(name):
            raise ValueError(f"invalid header name: {name!r}")
        if _FORBIDDEN_VALUE_CHARS.intersection(format_value(value)):
            raise ValueError(f"header value for {name!r} must not contain CR or LF")

    def with_header(self, name: str, value: FieldValue) -> "HeaderMap":
        """Return a copy of this map with one header set."""
        return self._copy_with(name, value)

    def get_text(self, name: str) -> Optional[str]:
        """Get a header value rendered as text, or None if absent."""
        if name not in self:
            return None
        return format_value(self[name])


class ParamMap(_FieldMap):
    """Query parameters, ordered by name and serialized as ``k=v&k=v``."""

    def _validate(self, name: str, value: FieldValue) -> None:
        if not name or "=" in name or _FORBIDDEN_PARAM_CHARS.intersection(name):
            raise ValueError(f"invalid query parameter name: {name!r}")
        if _FORBIDDEN_PARAM_CHARS.intersection(format_value(value)):
            raise ValueError(f"invalid query parameter value for {name!r}")

    def with_param(self, name: str, value: FieldValue) -> "ParamMap":
        """Return a copy of this map with one parameter set."""
        return self._copy_with(name, value)

    def serialize(self) -> str:
        """Serialize the parameters into a query string (without ``?``)."""
        return "&".join(f"{name}={value}" for name, value in self.rendered_items())


def _as_header_map(headers: Optional[FieldItems]) -> Optional[HeaderMap]:
    if headers is None or isinstance(headers, HeaderMap):
        return headers
    return HeaderMap(headers)


def _as_param_map(params: Optional[FieldItems]) -> Optional[ParamMap]:
    if params is None or isinstance(params, ParamMap):
        return params
    return ParamMap(params)


def _as_body(body: Union[bytes, bytearray, str, None]) -> Optional[bytes]:
    if body is None:
        return None
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    raise ValueError(f"body must be bytes or str, got {type(body).__name__}")


@dataclass(frozen=True)
class Request:
    """
    Immutable HTTP request description.

    Once created, the request cannot be modified - the ``with_*``
    methods return new Request instances.
    """

    path: str
    host: Optional[str] = None
    method: Method = Method.GET
    headers: Optional[HeaderMap] = None
    params: Optional[ParamMap] = None
    body: Optional[bytes] = None

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not isinstance(self.path, str) or not self.path:
            raise ValueError("path must be a non-empty str")

        if any(char.isspace() for char in self.path):
            raise ValueError(f"path must not contain whitespace: {self.path!r}")

        if self.host is not None:
            if not isinstance(self.host, str) or not self.host:
                raise ValueError("host must be a non-empty str")
            if any(char.isspace() for char in self.host):
                raise ValueError(f"host must not contain whitespace: {self.host!r}")

        if not isinstance(self.method, Method):
            raise ValueError("method must be a Method")

        if self.headers is not None:
            if not isinstance(self.headers, HeaderMap):
                raise ValueError("headers must be a HeaderMap")
            if "host" in self.headers:
                raise ValueError("set the Host header through the request host")

        if self.params is not None and not isinstance(self.params, ParamMap):
            raise ValueError("params must be a ParamMap")

        if self.body is not None and not isinstance(self.body, bytes):
            raise ValueError("body must be bytes")

    @classmethod
    def create(
        cls,
        path: str,
        method: Union[str, Method] = Method.GET,
        host: Optional[str] = None,
        headers: Optional[FieldItems] = None,
        params: Optional[FieldItems] = None,
        body: Union[bytes, bytearray, str, None] = None,
    ) -> "Request":
        """
        Create a Request with proper type conversion.

        Args:
            path: Request path, e.g. ``/images/json``
            method: HTTP method as Method or string token
            host: Value of the Host header (defaults to localhost)
            headers: Optional mapping or (name, value) pairs
            params: Optional mapping or (name, value) pairs for the query
            body: Optional body as bytes or UTF-8 text

        Returns:
            New Request instance
        """
        return cls(
            path=path,
            host=host,
            method=Method.parse(method),
            headers=_as_header_map(headers),
            params=_as_param_map(params),
            body=_as_body(body),
        )

    @classmethod
    def builder(cls, path: str) -> "RequestBuilder":
        """Start building a request for ``path``."""
        return RequestBuilder(path)

    @classmethod
    def get(cls, path: str) -> "RequestBuilder":
        return RequestBuilder(path).method(Method.GET)

    @classmethod
    def post(cls, path: str) -> "RequestBuilder":
        return RequestBuilder(path).method(Method.POST)

    @classmethod
    def put(cls, path: str) -> "RequestBuilder":
        return RequestBuilder(path).method(Method.PUT)

    @classmethod
    def delete(cls, path: str) -> "RequestBuilder":
        return RequestBuilder(path).method(Method.DELETE)

    @classmethod
    def patch(cls, path: str) -> "RequestBuilder":
        return RequestBuilder(path).method(Method.PATCH)

    def with_method(self, method: Union[str, Method]) -> "Request":
        """Create a new request with a different method."""
        return replace(self, method=Method.parse(method))

    def with_host(self, host: Optional[str]) -> "Request":
        """Create a new request with a different host."""
        return replace(self, host=host)

    def with_headers(self, headers: Optional[FieldItems]) -> "Request":
        """Create a new request with different headers."""
        return replace(self, headers=_as_header_map(headers))

    def with_params(self, params: Optional[FieldItems]) -> "Request":
        """Create a new request with different query parameters."""
        return replace(self, params=_as_param_map(params))

    def with_body(self, body: Union[bytes, bytearray, str, None]) -> "Request":
        """Create a new request with a different body."""
        return replace(self, body=_as_body(body))

    def add_header(self, name: str, value: FieldValue) -> "Request":
        """Add (or replace) a header on a copy of the request."""
        headers = self.headers if self.headers is not None else HeaderMap()
        return replace(self, headers=headers.with_header(name, value))

    @property
    def host_header(self) -> str:
        """The value sent in the Host header."""
        return self.host if self.host is not None else DEFAULT_HOST

    @property
    def target(self) -> str:
        """The request target: path plus query string, if any."""
        if self.params:
            return f"{self.path}?{self.params.serialize()}"
        return self.path


class RequestBuilder:
    """
    Incremental builder for Request.

    Every setter overwrites the previous value of its field and returns
    the builder, so calls can be chained. ``build()`` validates the
    collected fields and returns an immutable Request; the builder can
    keep being used afterwards without affecting requests already built.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._host: Optional[str] = None
        self._method = Method.GET
        self._headers: Optional[HeaderMap] = None
        self._params: Optional[ParamMap] = None
        self._body: Optional[bytes] = None

    def host(self, host: str) -> "RequestBuilder":
        self._host = host
        return self

    def method(self, method: Union[str, Method]) -> "RequestBuilder":
        self._method = Method.parse(method)
        return self

    def headers(self, headers: FieldItems) -> "RequestBuilder":
        self._headers = _as_header_map(headers)
        return self

    def header(self, name: str, value: FieldValue) -> "RequestBuilder":
        """Set a single header, keeping the others already collected."""
        current = self._headers if self._headers is not None else HeaderMap()
        self._headers = current.with_header(name, value)
        return self

    def params(self, params: FieldItems) -> "RequestBuilder":
        self._params = _as_param_map(params)
        return self

    def param(self, name: str, value: FieldValue) -> "RequestBuilder":
        """Set a single query parameter, keeping the others already collected."""
        current = self._params if self._params is not None else ParamMap()
        self._params = current.with_param(name, value)
        return self

    def body(self, body: Union[bytes, bytearray, str]) -> "RequestBuilder":
        self._body = _as_body(body)
        return self

    def build(self) -> Request:
        """Finalize the collected fields into a Request."""
        return Request(
            path=self._path,
            host=self._host,
            method=self._method,
            headers=self._headers,
            params=self._params,
            body=self._body,
        )


class FramingKind(Enum):
    """How the length of a response body is determined."""
    NONE = "none"
    FIXED_LENGTH = "fixed_length"
    CHUNKED = "chunked"


class BodyFraming(NamedTuple):
    """Body framing resolved for a single response."""
    kind: FramingKind
    length: Optional[int] = None

    @classmethod
    def none(cls) -> "BodyFraming":
        return cls(FramingKind.NONE)

    @classmethod
    def fixed_length(cls, length: int) -> "BodyFraming":
        if length < 0:
            raise ValueError("length must be non-negative")
        return cls(FramingKind.FIXED_LENGTH, length)

    @classmethod
    def chunked(cls) -> "BodyFraming":
        return cls(FramingKind.CHUNKED)


@dataclass(frozen=True)
class Response:
    """
    Immutable HTTP response representation.

    ``body`` is None only for status codes that forbid a body
    (204 and 304); every other response carries bytes, possibly empty.
    """

    status_code: StatusCode
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: Optional[bytes] = None

    def __post_init__(self) -> None:
        """Validate response data after initialization."""
        if isinstance(self.status_code, bool) or not isinstance(self.status_code, int):
            raise ValueError("status_code must be int")

        if self.status_code < 0:
            raise ValueError("status_code must be non-negative")

        if not isinstance(self.headers, HeaderMap):
            raise ValueError("headers must be a HeaderMap")

        if self.body is not None and not isinstance(self.body, bytes):
            raise ValueError("body must be bytes")

    def get_header(self, name: str) -> Optional[str]:
        """Get a header value by name (case-insensitive)."""
        return self.headers.get_text(name)

    def has_header(self, name: str) -> bool:
        """Check if a header exists (case-insensitive)."""
        return name in self.headers

    @property
    def is_success(self) -> bool:
        """True for 2xx status codes."""
        return 200 <= self.status_code < 300

    def text(self, encoding: str = "utf-8") -> str:
        """Decode the body as text."""
        if self.body is None:
            raise ValueError(f"response with status {self.status_code} has no body")
        return self.body.decode(encoding)

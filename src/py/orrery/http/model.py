from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, NamedTuple

from ..utils.io import DEFAULT_ENCODING
from .api import ResponseFactory
from .status import HTTP_STATUS

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`, memoizing the result."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPRequestLine(NamedTuple):
	"""Represents a request status line"""

	method: str
	path: str
	query: str
	protocol: str


class HTTPHeaders(NamedTuple):
	"""Wraps HTTP headers, keeping key information for request processing."""

	headers: dict[str, str]
	contentType: str | None = None
	contentLength: int | None = None


class HTTPProcessingStatus(Enum):
	"""Internal parser/processor state management"""

	Processing = 0
	Body = 1
	Timeout = 10
	NoData = 11
	BadFormat = 12


# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPRequestError(Exception):
	"""To be raised by handlers to generate an error response (500 unless
	a status is given)."""

	def __init__(
		self,
		message: str,
		status: int | None = None,
		contentType: str | None = None,
	):
		super().__init__(message)
		self.message: str = message
		self.status: int | None = status
		self.contentType: str | None = contentType


# -----------------------------------------------------------------------------
#
# BODY
#
# -----------------------------------------------------------------------------


class HTTPBodyBlob(NamedTuple):
	"""A request or response body, fully read."""

	payload: bytes = b""
	length: int = 0

	@staticmethod
	def FromBytes(data: bytes) -> "HTTPBodyBlob":
		return HTTPBodyBlob(payload=data, length=len(data))


class HTTPBodyWriter(ABC):
	"""Writes response heads and bodies to a connection, `shouldClose` being
	set once the peer is gone."""

	__slots__ = ["shouldClose"]

	def __init__(self) -> None:
		self.shouldClose: bool = False

	async def write(self, body: HTTPBodyBlob | bytes | None) -> bool:
		if body is None:
			return True
		return await self._writeBytes(
			body.payload if isinstance(body, HTTPBodyBlob) else body
		)

	@abstractmethod
	async def _writeBytes(self, chunk: bytes) -> bool: ...


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest(ResponseFactory["HTTPResponse"]):
	"""A parsed request. Handlers create their response from it, so that
	the response speaks the request's protocol."""

	__slots__ = ["protocol", "method", "path", "query", "headers", "body"]

	def __init__(
		self,
		method: str,
		path: str,
		query: dict[str, str] | None,
		headers: HTTPHeaders,
		body: HTTPBodyBlob | None = None,
		protocol: str = "HTTP/1.1",
	):
		super().__init__()
		self.method: str = method
		# Percent-decoded, without the query string
		self.path: str = path
		self.query: dict[str, str] = query or {}
		self.protocol: str = protocol
		self.headers: HTTPHeaders = headers
		self.body: HTTPBodyBlob = body or HTTPBodyBlob()

	def header(self, name: str) -> str | None:
		return self.headers.headers.get(headername(name))

	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			status=status,
			message=message,
			content=content,
			contentType=contentType,
			contentLength=contentLength,
			protocol=self.protocol,
			headers=headers,
		)

	def __str__(self) -> str:
		return f"Request({self.method} {self.path} {self.query})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""A response with its whole body, so that `Content-Length` is always
	known when the head is written."""

	@staticmethod
	def Create(
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		headers: dict[str, str] | None = None,
		status: int = 200,
		message: str | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPResponse":
		if content is None:
			payload = b""
		elif isinstance(content, str):
			payload = content.encode(DEFAULT_ENCODING)
		elif isinstance(content, (bytes, bytearray)):
			payload = bytes(content)
		else:
			raise ValueError(f"Unsupported content {type(content)}:{content}")
		fields: dict[str, str] = {headername(k): v for k, v in (headers or {}).items()}
		if contentType is not None:
			fields["Content-Type"] = contentType
		length: int = len(payload) if contentLength is None else contentLength
		fields["Content-Length"] = str(length)
		return HTTPResponse(
			protocol=protocol,
			status=status,
			message=message,
			headers=HTTPHeaders(fields, fields.get("Content-Type"), length),
			body=HTTPBodyBlob.FromBytes(payload),
		)

	__slots__ = ["protocol", "status", "message", "headers", "body"]

	def __init__(
		self,
		protocol: str,
		status: int,
		message: str | None,
		headers: HTTPHeaders,
		body: HTTPBodyBlob,
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str = message or HTTP_STATUS.get(status, "Unknown status")
		self.headers: HTTPHeaders = headers
		self.body: HTTPBodyBlob = body

	@property
	def contentType(self) -> str | None:
		return self.headers.contentType

	@property
	def content(self) -> bytes:
		return self.body.payload

	def getHeader(self, name: str) -> str | None:
		return self.headers.headers.get(headername(name))

	def head(self) -> bytes:
		"""The status line and headers, up to and including the blank line."""
		return "".join(
			[f"{self.protocol} {self.status} {self.message}\r\n"]
			+ [f"{k}: {v}\r\n" for k, v in self.headers.headers.items()]
			+ ["\r\n"]
		).encode("latin-1")

	def __str__(self) -> str:
		return f"Response({self.status} {self.message} {self.headers.headers})"


# EOF

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from ..utils.json import json
from .status import HTTP_STATUS

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# API
#
# -----------------------------------------------------------------------------

# --
# The responses the server produces: files, plain text errors and JSON
# listings, created from the request they answer.


class ResponseFactory(ABC, Generic[T]):
	@abstractmethod
	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> T: ...

	def error(
		self, status: int, content: str | None = None, contentType: str = "text/plain"
	) -> T:
		"""A plain text error, the body defaults to the status reason."""
		message = HTTP_STATUS.get(status, "Server Error")
		return self.respond(
			content=message if content is None else content,
			contentType=contentType,
			status=status,
			message=message,
		)

	def notFound(self, content: str = "Not Found") -> T:
		return self.error(404, content)

	def fail(self, content: str | None = None) -> T:
		return self.error(500, content)

	def returns(self, value: Any, *, contentType: str = "application/json") -> T:
		"""Responds with the JSON encoding of the given value."""
		payload: bytes = json(value)
		return self.respond(
			payload, contentType=contentType, contentLength=len(payload)
		)


# EOF

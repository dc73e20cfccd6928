import os.path
from pathlib import Path

from ..config import ServerConfig
from ..decorators import on
from ..model import Service
from ..http.model import HTTPRequest, HTTPResponse
from ..utils.files import contentType
from ..utils.logging import event


class StaticFileService(Service):
	"""Serves the files under the configured root. Directories are served
	through their index file, content types come from the MIME registry."""

	def __init__(self, config: ServerConfig | None = None):
		self.config: ServerConfig = config or ServerConfig()
		super().__init__()

	@property
	def root(self) -> Path:
		return self.config.root.absolute()

	def resolvePath(self, path: str) -> Path | None:
		"""Joins the request path to the root, rewriting directories to their
		index file. Returns `None` when the path is outside of the root and
		the configuration confines paths to the root."""
		# Leading slashes would otherwise make the path absolute
		local_path = self.root.joinpath(path.lstrip("/"))
		if self.config.confine:
			normalized = Path(os.path.normpath(local_path))
			if normalized.parts[: len(parts := self.root.parts)] != parts:
				return None
		# `os.path` swallows stat errors (name too long, no access), which
		# are then reported as not found
		if os.path.isdir(local_path):
			local_path = local_path / self.config.index
		return local_path

	def log(self, status: int, path: str) -> None:
		if self.config.logRequests:
			event(str(status), path)

	@on(ANY="/{path:any}")
	def read(self, request: HTTPRequest, path: str = "") -> HTTPResponse:
		local_path = self.resolvePath(path)
		if local_path is None or not os.path.exists(local_path):
			self.log(404, request.path)
			return request.notFound(f"File {request.path} not found!")
		try:
			data = local_path.read_bytes()
		except OSError as e:
			self.log(500, str(e))
			return request.fail(f"Error reading file: {e}")
		self.log(200, request.path)
		return request.respond(data, contentType=contentType(local_path))


# EOF

from dataclasses import dataclass, field
from os import getenv
from pathlib import Path

PORT: int = int(getenv("ORRERY_PORT", 3000))

# The demos are opened from other machines on the local network as well
HOST: str = getenv("ORRERY_HOST", "0.0.0.0")  # nosec: B104

LOG_REQUESTS: bool = getenv("ORRERY_LOG_REQUESTS", "1") == "1"

IMAGES: str = "images"
INDEX: str = "index.html"


@dataclass(frozen=True, slots=True)
class ServerConfig:
	"""Immutable server configuration, passed to the services and the
	server. The root defaults to the working directory at creation time."""

	host: str = HOST
	port: int = PORT
	root: Path = field(default_factory=Path.cwd)
	images: str = IMAGES
	index: str = INDEX
	# When set, paths resolving outside of the root are not served
	confine: bool = False
	logRequests: bool = LOG_REQUESTS

	@property
	def imagesPath(self) -> Path:
		return self.root / self.images

	@property
	def url(self) -> str:
		host = "localhost" if self.host in ("0.0.0.0", "") else self.host
		return f"http://{host}:{self.port}/"


# EOF

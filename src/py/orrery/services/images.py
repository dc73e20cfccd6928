import os
from pathlib import Path
from typing import NamedTuple

from ..config import ServerConfig
from ..decorators import expose
from ..model import Service
from ..utils.files import isImage
from ..utils.logging import event, warning


class ImageDescriptor(NamedTuple):
	"""An image available to the gallery, `thumbnail` is the same as `url`
	as no thumbnails are generated."""

	name: str
	url: str
	thumbnail: str

	@staticmethod
	def FromName(name: str, prefix: str = "/images/") -> "ImageDescriptor":
		url = f"{prefix}{name}"
		return ImageDescriptor(name=name, url=url, thumbnail=url)


def listImages(directory: Path | str, prefix: str = "/images/") -> list[ImageDescriptor]:
	"""Lists the images in `directory`, in the order the file system returns
	them. A directory that can't be read yields an empty list."""
	try:
		names = os.listdir(directory)
	except OSError as e:
		warning(
			"Could not read images directory",
			Path=str(directory),
			Error=e.strerror or str(e),
		)
		return []
	return [ImageDescriptor.FromName(_, prefix) for _ in names if isImage(_)]


class ImageService(Service):
	"""Lists the images of the configured images directory as JSON, the
	directory is scanned again on every request."""

	def __init__(self, config: ServerConfig | None = None):
		self.config: ServerConfig = config or ServerConfig()
		super().__init__()

	@property
	def imagesURL(self) -> str:
		return f"/{Path(self.config.images).as_posix().strip('/')}/"

	# Takes precedence over the static files catch-all route
	@expose(priority=10, ANY="/api/images")
	def images(self) -> list[ImageDescriptor]:
		res = listImages(self.config.imagesPath, self.imagesURL)
		if self.config.logRequests:
			event("200", "/api/images", Images=len(res))
		return res


# EOF

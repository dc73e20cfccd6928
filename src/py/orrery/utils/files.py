import os.path
from pathlib import Path

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"

# Extension (lowercase, with the dot) to content type. This is kept
# explicit, the demos rely on these exact values.
MIME_TYPES: dict[str, str] = {
	".html": "text/html",
	".js": "text/javascript",
	".css": "text/css",
	".json": "application/json",
	".png": "image/png",
	".jpg": "image/jpeg",
	".jpeg": "image/jpeg",
	".gif": "image/gif",
	".svg": "image/svg+xml",
	".webp": "image/webp",
}

IMAGE_EXTENSIONS: frozenset[str] = frozenset(
	(".jpg", ".jpeg", ".png", ".gif", ".webp")
)


def extension(path: Path | str) -> str:
	"""Returns the lowercase extension of the path, including the dot,
	or an empty string."""
	return os.path.splitext(str(path))[1].lower()


def contentType(path: Path | str) -> str:
	"""Looks up the content type for the given path in the registry."""
	return MIME_TYPES.get(extension(path), DEFAULT_CONTENT_TYPE)


def isImage(path: Path | str) -> bool:
	return extension(path) in IMAGE_EXTENSIONS


# EOF

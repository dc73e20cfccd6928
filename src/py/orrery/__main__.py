import argparse
from pathlib import Path

from .config import HOST, PORT, LOG_REQUESTS, IMAGES, ServerConfig
from .server import run


def parse(args: list[str] | None = None) -> ServerConfig:
	"""Parses the command line arguments into a server configuration."""
	parser = argparse.ArgumentParser(
		prog="orrery",
		description="Serves the 3D demos and the listing of their images",
	)
	parser.add_argument("--host", default=HOST, help="Address to listen on")
	parser.add_argument("-p", "--port", type=int, default=PORT, help="Port to listen on")
	parser.add_argument(
		"-r",
		"--root",
		type=Path,
		default=None,
		help="Directory to serve (defaults to the current directory)",
	)
	parser.add_argument(
		"--images",
		default=IMAGES,
		help="Images directory, relative to the root",
	)
	parser.add_argument(
		"--confine",
		action="store_true",
		help="Refuse paths that resolve outside of the root",
	)
	parser.add_argument(
		"-q", "--quiet", action="store_true", help="Do not log requests"
	)
	opts = parser.parse_args(args)
	return ServerConfig(
		host=opts.host,
		port=opts.port,
		root=(opts.root or Path.cwd()).absolute(),
		images=opts.images,
		confine=opts.confine,
		logRequests=LOG_REQUESTS and not opts.quiet,
	)


def main(args: list[str] | None = None) -> None:
	run(config=parse(args))


if __name__ == "__main__":
	main()

# EOF

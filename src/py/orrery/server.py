import asyncio
import socket
import threading
from dataclasses import dataclass, replace
from signal import SIGINT, SIGTERM
from typing import Any, Callable, NamedTuple

from .config import ServerConfig
from .http.model import (
	HTTPBodyWriter,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPResponse,
)
from .http.parser import HTTPParser
from .model import Application, Service, mount
from .services.files import StaticFileService
from .services.images import ImageService
from .utils.limits import LimitType, unlimit
from .utils.logging import debug, event, exception, info, warning, error


@dataclass(slots=True)
class ServerState:
	isRunning: bool = True
	port: int | None = None

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		e = context.get("exception")
		if e:
			exception(e)


class ServerOptions(NamedTuple):
	host: str = "0.0.0.0"  # nosec: B104
	port: int = 3000
	backlog: int = 10_000
	# Polling timeout for accepting new connections
	polling: float = 1.0
	readsize: int = 4_096
	keepalive: float = 60.0
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True
	# Number of ports after `port` to try when it is already taken, none by
	# default as the demos expect a fixed port
	alternatePorts: int = 0
	# Called with the bound port once the server listens
	onListen: Callable[[int], None] | None = None

	@staticmethod
	def FromConfig(config: ServerConfig, **options: Any) -> "ServerOptions":
		return ServerOptions(host=config.host, port=config.port, **options)


OPTIONS: ServerOptions = ServerOptions()


SERVER_BADREQUEST: bytes = (
	b"HTTP/1.1 400 Bad Request\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 11\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Bad Request"
)
SERVER_ERROR: bytes = (
	b"HTTP/1.1 500 Internal Server Error\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 39\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Internal server error: Request not sent"
)


class AIOSocketBodyWriter(HTTPBodyWriter):
	"""Specialized body writer to work with AIO sockets."""

	def __init__(
		self,
		client: "socket.socket",
		loop: asyncio.AbstractEventLoop,
	) -> None:
		super().__init__()
		self.client: socket.socket = client
		self.loop: asyncio.AbstractEventLoop = loop

	async def _writeBytes(self, chunk: bytes) -> bool:
		if chunk:
			await self.loop.sock_sendall(self.client, chunk)
		return True


class AIOSocketServer:
	"""AsyncIO backend using sockets directly."""

	@classmethod
	async def OnRequest(
		cls,
		app: Application,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
	) -> None:
		"""Processes the requests sent on the client socket until the
		connection is closed or times out."""
		size: int = options.readsize
		buffer = bytearray(size)
		keep_alive: bool = True
		status: HTTPProcessingStatus = HTTPProcessingStatus.Processing
		req_count: int = 0
		res_count: int = 0
		try:
			parser: HTTPParser = HTTPParser()
			writer: AIOSocketBodyWriter = AIOSocketBodyWriter(client, loop)
			while keep_alive and not writer.shouldClose:
				try:
					n = await asyncio.wait_for(
						loop.sock_recv_into(client, buffer),
						timeout=options.keepalive,
					)
				except asyncio.TimeoutError:
					status = HTTPProcessingStatus.Timeout
					break
				if not n:
					# No data means the client closed the connection
					status = HTTPProcessingStatus.NoData
					break
				# With HTTP pipelining, a single read may hold more than one
				# request.
				for atom in parser.feed(bytes(buffer[:n])):
					if atom is HTTPProcessingStatus.BadFormat:
						warning("Malformed request", Requests=req_count)
						await writer.write(SERVER_BADREQUEST)
						keep_alive = False
						break
					elif isinstance(atom, HTTPRequest):
						req = atom
						req_count += 1
						debug("Request", Method=req.method, Path=req.path)
						if (
							req.protocol == "HTTP/1.0"
							or (req.header("Connection") or "").lower() == "close"
						):
							keep_alive = False
						if await cls.SendResponse(req, app, writer):
							res_count += 1
			if status is HTTPProcessingStatus.NoData and req_count == 0:
				debug("Client closed without sending a request")
			elif req_count != res_count:
				warning(
					"Incomplete responses",
					Status=status.name,
					Requests=req_count,
					Responses=res_count,
				)
		except (ConnectionResetError, BrokenPipeError):
			debug("Client reset the connection")
		except Exception as e:
			exception(e)
		finally:
			client.close()

	@staticmethod
	async def SendResponse(
		request: HTTPRequest,
		app: Application,
		writer: HTTPBodyWriter,
	) -> HTTPResponse | None:
		"""Processes the request within the application and sends a response
		using the given writer."""
		req: HTTPRequest = request
		res: HTTPResponse | None = None
		sent: bool = False
		try:
			r = app.process(req)
			res = r if isinstance(r, HTTPResponse) else await r
		except Exception as e:
			exception(e, f"Could not process {req.method} {req.path}")
		if res is None:
			warning(
				"Application did not return a response",
				Method=req.method,
				Path=req.path,
			)
		else:
			try:
				await writer.write(res.head())
				sent = True
				# A response to HEAD has the same headers, but no body
				if req.method != "HEAD":
					await writer.write(res.body)
			except BrokenPipeError:
				# Client did an early close
				sent = True
		if not sent:
			await writer.write(SERVER_ERROR)
			writer.shouldClose = True
		return res

	@classmethod
	async def Serve(
		cls,
		app: Application,
		options: ServerOptions = ServerOptions(),
		state: ServerState | None = None,
	) -> None:
		"""Main server coroutine."""
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		server.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
		port: int = options.port
		try:
			server.bind((options.host, port))
		except OSError as e:
			bound: bool = False
			if options.alternatePorts:
				warning(f"Could not bind to {options.host}:{port}, trying other ports.")
			for p in range(options.port + 1, options.port + 1 + options.alternatePorts):
				try:
					server.bind((options.host, p))
				except OSError:
					continue
				bound = True
				port = p
				info(f"Found alternate available port: {port}")
				break
			if not bound:
				server.close()
				error(
					f"Unable to bind to {options.host}:{options.port}, aborting.",
					"HOSTPORTERR",
				)
				raise e

		server.listen(options.backlog)
		server.setblocking(False)

		tasks: set[asyncio.Task[None]] = set()
		loop = asyncio.get_running_loop()
		state = state or ServerState()
		state.port = server.getsockname()[1]
		# Signal handlers can only be registered from the main thread
		if (
			options.stopSignals
			and threading.current_thread() is threading.main_thread()
		):
			loop.add_signal_handler(SIGINT, state.stop)
			loop.add_signal_handler(SIGTERM, state.stop)
		loop.set_exception_handler(state.onException)

		info(
			"Orrery server listening",
			icon="🚀",
			Host=options.host,
			Port=state.port,
		)

		try:
			while state.isRunning:
				if options.condition and not options.condition():
					break
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling or 1.0
					)
				except asyncio.TimeoutError:
					continue
				except OSError as e:
					# This can be: [OSError] [Errno 24] Too many open files
					if e.errno == 24:
						await asyncio.sleep(0.1)
					else:
						exception(e)
					continue
				task = loop.create_task(
					cls.OnRequest(app, client, loop=loop, options=options)
				)
				tasks.add(task)
				task.add_done_callback(tasks.discard)
		finally:
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)


def banner(config: ServerConfig, port: int | None = None) -> None:
	"""Tells where to point the browser, `port` being the one actually
	bound."""
	if port is not None:
		config = replace(config, port=port)
	info("3D Solar System Server", icon="🪐")
	info(f"Server running at {config.url}", Root=str(config.root))
	info(f"Open your browser and navigate to {config.url}", icon="🌌")
	info("Press Ctrl+C to stop the server")


def application(config: ServerConfig) -> Application:
	"""Creates the application serving the image listing and the static
	files for the given configuration."""
	return mount(ImageService(config), StaticFileService(config))


def run(
	*components: Application | Service,
	config: ServerConfig | None = None,
	condition: Callable[[], bool] | None = None,
	polling: float = OPTIONS.polling,
	keepalive: float = OPTIONS.keepalive,
	stopSignals: bool = True,
	state: ServerState | None = None,
) -> None:
	"""High level function to run the server. When no component is given,
	the default application for the configuration is served."""
	config = config or ServerConfig()
	unlimit(LimitType.Files)
	options = ServerOptions.FromConfig(
		config,
		condition=condition,
		polling=polling,
		keepalive=keepalive,
		stopSignals=stopSignals,
		onListen=lambda port: banner(config, port),
	)
	app = mount(*components) if components else application(config)
	try:
		asyncio.run(AIOSocketServer.Serve(app, options, state))
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF

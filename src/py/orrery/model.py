from typing import Iterable, Any, Coroutine

from .routing import Handler, Dispatcher
from .http.model import HTTPRequest, HTTPResponse
from .utils.logging import warning

# -----------------------------------------------------------------------------
#
# SERVICE
#
# -----------------------------------------------------------------------------


class Service:
	"""Groups handlers (methods decorated with `@on` or `@expose`) that get
	registered in an application's dispatcher when mounted."""

	def __init__(self, prefix: str = "") -> None:
		self.prefix: str = prefix
		self.app: Application | None = None

	@property
	def handlers(self) -> Iterable[Handler]:
		# Looked up on the class, so that properties are not evaluated
		for name in dir(type(self)):
			if callable(getattr(type(self), name)):
				handler = Handler.Get(getattr(self, name))
				if handler:
					yield handler

	def __repr__(self) -> str:
		return f"(Service {type(self).__name__}{' :mounted' if self.app else ''})"


# -----------------------------------------------------------------------------
#
# APPLICATION
#
# -----------------------------------------------------------------------------


class Application:
	"""Dispatches requests to the handlers of the mounted services."""

	def __init__(self) -> None:
		self.dispatcher: Dispatcher = Dispatcher()
		self.services: list[Service] = []

	def process(
		self, request: HTTPRequest
	) -> HTTPResponse | Coroutine[Any, Any, HTTPResponse]:
		route, params = self.dispatcher.match(request.method, request.path or "/")
		if route and route.handler:
			return route.handler(request, params)
		warning("No route found", Method=request.method, Path=request.path)
		return request.notFound(f"No route found for {request.path}")

	def mount(self, service: Service) -> Service:
		if service.app:
			raise RuntimeError(f"Service is already mounted: {service}")
		for handler in service.handlers:
			self.dispatcher.register(handler, service.prefix)
		service.app = self
		self.services.append(service)
		return service


def mount(*components: Application | Service) -> Application:
	"""Mounts the given services into the first given application, or into a
	new one."""
	app = next((_ for _ in components if isinstance(_, Application)), None)
	app = app or Application()
	for item in components:
		if isinstance(item, Service):
			app.mount(item)
		elif item is not app:
			raise RuntimeError(f"Unsupported component type {type(item)}: {item}")
	return app


# EOF

from typing import ClassVar, Union, Callable, NamedTuple, TypeVar, Any, cast

T = TypeVar("T")

# Method name matching any HTTP method
ANY: str = "ANY"


class Orrery:
	"""Defines the attributes used by decorators"""

	ON: ClassVar[str] = "_orrery_on"
	ON_PRIORITY: ClassVar[str] = "_orrery_on_priority"
	EXPOSE: ClassVar[str] = "_orrery_expose"

	@staticmethod
	def Meta(scope: Any) -> dict[str, Any]:
		"""Returns the dictionary of meta attributes for the given value."""
		if hasattr(scope, "__func__"):
			scope = scope.__func__
		if hasattr(scope, "__dict__"):
			return cast(dict[str, Any], scope.__dict__)
		else:
			raise RuntimeError(f"Metadata cannot be attached to object: {scope}")


def register(
	meta: dict[str, Any],
	priority: int,
	methods: dict[str, Union[str, list[str], tuple[str, ...]]],
) -> None:
	v = meta.setdefault(Orrery.ON, [])
	meta.setdefault(Orrery.ON_PRIORITY, int(priority))
	for http_methods, url in methods.items():
		urls = (url,) if isinstance(url, str) else url
		for http_method in http_methods.upper().split("_"):
			for _ in urls:
				v.append((http_method, _))


def on(
	priority: int = 0, **methods: Union[str, list[str], tuple[str, ...]]
) -> Callable[[T], T]:
	"""The @on decorator binds a service method to one or more routes, for
	instance:

	>    @on(GET="/list/{what:string}")
	>    def listThings(self, request, what):
	>        return request.respond(...)

	Methods can be combined with `_` as in `GET_HEAD`, and `ANY` matches
	every method. When more than one route matches a path, the one with
	the highest priority wins. The decorated method takes the request and
	the route parameters, and returns a response."""

	def decorator(function: T) -> T:
		register(Orrery.Meta(function), priority, methods)
		return function

	return decorator


class Expose(NamedTuple):
	contentType: str | None = None


def expose(
	priority: int = 0,
	contentType: str | None = None,
	**methods: Union[str, list[str], tuple[str, ...]],
) -> Callable[[T], T]:
	"""A variant of @on where the decorated method does not receive the
	request and its return value is sent back as JSON."""

	def decorator(function: T) -> T:
		meta = Orrery.Meta(function)
		register(meta, priority, methods)
		meta.setdefault(Orrery.EXPOSE, Expose(contentType=contentType))
		return function

	return decorator


# EOF
